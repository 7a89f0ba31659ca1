from datetime import datetime, timezone

import pytest

from provisioning_cli.models import (
    Customer,
    CustomerAttributes,
    CustomerList,
    FirstAdminUser,
    KeyValueEntry,
    NewCustomerRequest,
    UpdateCustomerRequest,
    UserList,
)

from fakes import customer_json, customer_page, user_json


def test_new_customer_request_omits_unset_fields():
    req = NewCustomerRequest(
        customer_contract_type="pay",
        quota_max=1000,
        user_max=10,
        first_admin_user=FirstAdminUser(first_name="A", last_name="B"),
    )
    assert req.to_dict() == {
        "customerContractType": "pay",
        "quotaMax": 1000,
        "userMax": 10,
        "firstAdminUser": {"firstName": "A", "lastName": "B"},
    }


def test_new_customer_request_from_file_shape():
    obj = {
        "customerContractType": "demo",
        "quotaMax": 5,
        "userMax": 2,
        "companyName": "Acme",
        "providerCustomerId": "ext-1",
        "customerAttributes": {"items": [{"key": "tier", "value": "gold"}]},
        "firstAdminUser": {
            "firstName": "Ada",
            "lastName": "Lovelace",
            "authData": {"method": "basic", "mustChangePassword": True},
            "notifyUser": True,
        },
    }
    req = NewCustomerRequest.from_dict(obj)
    assert req.company_name == "Acme"
    assert req.first_admin_user.auth_data is not None
    assert req.first_admin_user.auth_data.must_change_password is True
    assert req.customer_attributes == CustomerAttributes(items=(KeyValueEntry(key="tier", value="gold"),))
    assert req.to_dict() == obj


@pytest.mark.parametrize(
    "obj",
    [
        [],
        {"quotaMax": 1, "userMax": 1, "firstAdminUser": {"firstName": "a", "lastName": "b"}},
        {"customerContractType": "pay", "quotaMax": "1", "userMax": 1, "firstAdminUser": {"firstName": "a", "lastName": "b"}},
        {"customerContractType": "pay", "quotaMax": 1, "userMax": True, "firstAdminUser": {"firstName": "a", "lastName": "b"}},
        {"customerContractType": "pay", "quotaMax": 1, "userMax": 1},
        {"customerContractType": "pay", "quotaMax": 1, "userMax": 1, "firstAdminUser": {"firstName": "a"}},
    ],
)
def test_new_customer_request_rejects_invalid_objects(obj):
    with pytest.raises(ValueError):
        NewCustomerRequest.from_dict(obj)


def test_first_admin_user_new_local_defaults_username_to_email():
    admin = FirstAdminUser.new_local(first_name="Ada", last_name="L", email="ada@example.com")
    assert admin.user_name == "ada@example.com"
    assert admin.to_dict() == {
        "firstName": "Ada",
        "lastName": "L",
        "userName": "ada@example.com",
        "authData": {"method": "basic", "mustChangePassword": True},
        "email": "ada@example.com",
    }


def test_first_admin_user_new_local_keeps_explicit_username():
    admin = FirstAdminUser.new_local(first_name="Ada", last_name="L", email="ada@example.com", user_name="ada")
    assert admin.user_name == "ada"


def test_update_customer_request_sends_only_set_fields():
    assert UpdateCustomerRequest(quota_max=42).to_dict() == {"quotaMax": 42}
    assert UpdateCustomerRequest().to_dict() == {}


def test_customer_attributes_add_attribute_appends_in_order():
    attribs = CustomerAttributes().add_attribute("a", "1").add_attribute("b", "2")
    assert attribs.to_dict() == {"items": [{"key": "a", "value": "1"}, {"key": "b", "value": "2"}]}
    assert CustomerAttributes.from_pairs([("a", "1"), ("b", "2")]) == attribs


def test_empty_customer_attributes_serialize_to_empty_items():
    assert CustomerAttributes().to_dict() == {"items": []}


def test_customer_parses_timestamps_and_optional_attributes():
    c = Customer.from_dict(
        customer_json(
            3,
            updatedAt="2024-02-01T00:00:00.000Z",
            customerAttributes={"items": [{"key": "k", "value": "v"}]},
        )
    )
    assert c.created_at == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert c.updated_at == datetime(2024, 2, 1, tzinfo=timezone.utc)
    assert c.last_login_at is None
    assert c.customer_attributes is not None
    assert c.customer_attributes.items[0].key == "k"
    assert c.to_dict()["createdAt"] == "2024-01-02T03:04:05Z"


def test_customer_rejects_bad_timestamp():
    with pytest.raises(ValueError, match="createdAt"):
        Customer.from_dict(customer_json(createdAt="yesterday"))


def test_customer_list_requires_range():
    with pytest.raises(ValueError):
        CustomerList.from_dict({"items": []})


def test_user_list_keeps_roles_object():
    page = customer_page([user_json(userRoles={"items": [{"id": 1, "name": "CONFIG_MANAGER"}]})], total=1)
    users = UserList.from_dict(page)
    assert users.range.total == 1
    assert users.items[0].user_name == "ada"
    assert users.items[0].user_roles == {"items": [{"id": 1, "name": "CONFIG_MANAGER"}]}
