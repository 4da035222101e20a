import pytest

from storeapps.infrastructure.modules import load_management_module
from storeapps.services.policy import FailurePolicy, StagePolicies
from storeapps.services.session import SessionConnectError, connect_session


def test_connect_passes_settings(fake_module_path):
    api = load_management_module(fake_module_path)

    session = connect_session(api, {"tenant_id": "contoso"})

    assert session == {"tenant": "contoso"}
    assert api.module.connect_settings == [{"tenant_id": "contoso"}]


def test_connect_failure_is_wrapped(fake_module_path):
    api = load_management_module(fake_module_path)

    with pytest.raises(SessionConnectError, match="admin consent missing"):
        connect_session(api, {"fail": True})


def test_module_load_policy_must_be_fatal():
    with pytest.raises(ValueError):
        StagePolicies(module_load=FailurePolicy.CONTINUE_DEGRADED)


def test_tolerant_policies():
    policies = StagePolicies.tolerant()
    assert policies.module_load is FailurePolicy.FATAL
    assert policies.import_records is FailurePolicy.CONTINUE_DEGRADED
    assert policies.connect is FailurePolicy.CONTINUE_DEGRADED
    assert StagePolicies.strict().connect is FailurePolicy.FATAL
