from vivialconnect.models import Account, Contact

from conftest import ACCOUNT, make_response

CONTACT = {
    "id": 9,
    "account_id": ACCOUNT,
    "contact_type": "billing",
    "first_name": "Ada",
    "last_name": "Lovelace",
    "email": "ada@example.com",
    "company_name": "Engines Ltd",
}


def test_get_and_update_account(api, session):
    session.queue(
        make_response(200, {"account": {"id": ACCOUNT, "company_name": "Old", "date_created": "2017-01-01T00:00:00Z"}}),
        make_response(200, {"account": {"id": ACCOUNT, "company_name": "New"}}),
    )

    account = Account.get_account(client=api)
    assert session.calls[0].path == f"accounts/{ACCOUNT}.json"
    assert account.company_name == "Old"
    assert account.date_created.year == 2017

    account.company_name = "New"
    account.update()
    assert session.calls[1].method == "PUT"
    assert session.calls[1].path == f"accounts/{ACCOUNT}.json"
    assert session.calls[1].body == {"account": {"id": ACCOUNT, "company_name": "New"}}
    assert account.company_name == "New"


def test_create_contact(api, session):
    session.queue(make_response(200, {"contact": CONTACT}))
    contact = Contact(contact_type="billing", first_name="Ada", last_name="Lovelace",
                      email="ada@example.com", company_name="Engines Ltd").bind(api)

    contact.create()

    assert session.last.method == "POST"
    assert session.last.path == f"accounts/{ACCOUNT}/contacts.json"
    body = session.last.body["contact"]
    assert body["first_name"] == "Ada"
    assert "fax" not in body
    assert "id" not in body
    assert contact.id == 9


def test_update_and_delete_contact(api, session):
    session.queue(make_response(200, {"contact": dict(CONTACT, phone="+13125551000")}), make_response(204))
    contact = Contact(**CONTACT).bind(api)
    contact.phone = "+13125551000"

    contact.update()
    assert session.calls[0].method == "PUT"
    assert session.calls[0].path == f"accounts/{ACCOUNT}/contacts/9.json"
    assert session.calls[0].body["contact"]["id"] == 9
    assert contact.phone == "+13125551000"

    assert contact.delete() is True


def test_contact_finders(api, session):
    session.queue(
        make_response(200, {"contacts": [CONTACT]}),
        make_response(200, {"contact": CONTACT}),
        make_response(200, {"count": 1}),
    )
    assert Contact.get_contacts(client=api)[0].email == "ada@example.com"
    assert Contact.get_by_id(9, client=api).id == 9
    assert session.calls[1].path == f"accounts/{ACCOUNT}/contacts/9.json"
    assert Contact.count(client=api) == 1
