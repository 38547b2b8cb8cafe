from crm.models.contact import Contact


def create_contact(client, headers, **fields):
    payload = {"firstName": "Carl", "lastName": "Contact", **fields}
    response = client.post("/api/contacts", headers=headers, json=payload)
    assert response.status_code == 201, response.json()
    return response.json()


class TestCreateContact:
    """Tests for POST /api/contacts"""

    def test_create_contact_with_company(self, client, headers_a, company_a):
        contact = create_contact(
            client, headers_a, email="carl@acme.com", position="CTO", companyId=company_a["id"]
        )

        assert contact["status"] == "ACTIVE"
        assert contact["companyId"] == company_a["id"]
        assert contact["company"] == {"id": company_a["id"], "name": "Acme Corp"}
        assert contact["counts"] == {"deals": 0, "activities": 0, "notes": 0}

    def test_create_contact_without_company(self, client, headers_a):
        contact = create_contact(client, headers_a)

        assert contact["companyId"] is None
        assert contact["company"] is None

    def test_company_of_other_tenant_rejected(self, client, db_session, headers_a, company_b):
        """Cross-tenant company reference fails like a missing one"""
        response = client.post(
            "/api/contacts",
            headers=headers_a,
            json={"firstName": "Carl", "lastName": "Contact", "companyId": company_b["id"]},
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "Company not found"
        assert db_session.query(Contact).count() == 0

    def test_invalid_email_rejected(self, client, headers_a):
        response = client.post(
            "/api/contacts",
            headers=headers_a,
            json={"firstName": "Carl", "lastName": "Contact", "email": "not-an-email"},
        )
        assert response.status_code == 400


class TestContactIsolation:
    def test_other_tenant_gets_404(self, client, headers_a, headers_b):
        contact = create_contact(client, headers_a)

        assert client.get(f"/api/contacts/{contact['id']}", headers=headers_b).status_code == 404
        assert client.get(f"/api/contacts/{contact['id']}", headers=headers_a).status_code == 200

    def test_cannot_modify_other_tenant_contact(self, client, headers_a, headers_b):
        contact = create_contact(client, headers_a)

        response = client.patch(
            f"/api/contacts/{contact['id']}", headers=headers_b, json={"firstName": "Eve"}
        )
        assert response.status_code == 404

        response = client.delete(f"/api/contacts/{contact['id']}", headers=headers_b)
        assert response.status_code == 404

    def test_filter_by_foreign_company_returns_nothing(
        self, client, headers_a, headers_b, company_a
    ):
        create_contact(client, headers_a, companyId=company_a["id"])

        body = client.get(f"/api/contacts?companyId={company_a['id']}", headers=headers_b).json()
        assert body["data"] == []
        assert body["meta"]["total"] == 0


class TestListContacts:
    """Tests for GET /api/contacts"""

    def test_search_across_fields(self, client, headers_a):
        create_contact(client, headers_a, firstName="Ada", lastName="Lovelace")
        create_contact(client, headers_a, firstName="Alan", lastName="Turing", position="Engineer")
        create_contact(client, headers_a, firstName="Grace", email="grace@navy.com")

        assert client.get("/api/contacts?search=love", headers=headers_a).json()["meta"]["total"] == 1
        assert client.get("/api/contacts?search=ENGINEER", headers=headers_a).json()["meta"]["total"] == 1
        assert client.get("/api/contacts?search=navy", headers=headers_a).json()["meta"]["total"] == 1

    def test_filter_by_company_and_status(self, client, headers_a, company_a):
        create_contact(client, headers_a, companyId=company_a["id"])
        create_contact(client, headers_a, companyId=company_a["id"], status="PROSPECT")
        create_contact(client, headers_a)

        by_company = client.get(f"/api/contacts?companyId={company_a['id']}", headers=headers_a)
        assert by_company.json()["meta"]["total"] == 2

        prospects = client.get("/api/contacts?status=PROSPECT", headers=headers_a)
        assert prospects.json()["meta"]["total"] == 1


class TestUpdateContact:
    """Tests for PATCH /api/contacts/{id}"""

    def test_move_to_company(self, client, headers_a, company_a):
        contact = create_contact(client, headers_a)

        response = client.patch(
            f"/api/contacts/{contact['id']}", headers=headers_a, json={"companyId": company_a["id"]}
        )

        assert response.status_code == 200
        assert response.json()["company"]["name"] == "Acme Corp"

    def test_detach_from_company(self, client, headers_a, company_a):
        contact = create_contact(client, headers_a, companyId=company_a["id"])

        response = client.patch(
            f"/api/contacts/{contact['id']}", headers=headers_a, json={"companyId": None}
        )

        assert response.status_code == 200
        assert response.json()["companyId"] is None

    def test_move_to_other_tenant_company_rejected(self, client, headers_a, company_b):
        contact = create_contact(client, headers_a)

        response = client.patch(
            f"/api/contacts/{contact['id']}", headers=headers_a, json={"companyId": company_b["id"]}
        )
        assert response.status_code == 404


class TestContactDetailAndStats:
    def test_detail_includes_deals(self, client, headers_a, admin_a):
        contact = create_contact(client, headers_a)
        client.post(
            "/api/deals",
            headers=headers_a,
            json={"title": "Renewal", "ownerId": admin_a.id, "contactId": contact["id"]},
        )

        data = client.get(f"/api/contacts/{contact['id']}", headers=headers_a).json()

        assert [d["title"] for d in data["deals"]] == ["Renewal"]
        assert data["counts"]["deals"] == 1

    def test_delete_contact(self, client, headers_a):
        contact = create_contact(client, headers_a)

        response = client.delete(f"/api/contacts/{contact['id']}", headers=headers_a)

        assert response.status_code == 200
        assert response.json()["message"] == "Contact deleted successfully"
        assert client.get(f"/api/contacts/{contact['id']}", headers=headers_a).status_code == 404

    def test_stats(self, client, headers_a, headers_b, company_a):
        create_contact(client, headers_a, companyId=company_a["id"])
        create_contact(client, headers_a, status="PROSPECT")
        create_contact(client, headers_a, status="INACTIVE")
        create_contact(client, headers_b)

        response = client.get("/api/contacts/stats", headers=headers_a)

        assert response.status_code == 200
        assert response.json() == {
            "total": 3,
            "active": 1,
            "prospects": 1,
            "withoutCompany": 2,
        }
