"""
Tests for the MPI aggregate and its derived Docs / Customer records.

Tests cover:
- Creation with default sections, version history and derived records
- "AUTO" numbering
- Duplicate numbers leave nothing behind
- Ownership scoping (404 for other engineers)
- Partial updates, section replacement, revision history, derived-record sync
- Delete fan-out
- Admin views and status changes
- Admin Docs CRUD and engineer Customer records
"""

import pytest

from conftest import mpi_payload
from services.mpi_service import DEFAULT_SECTIONS


def _counts(client, engineer_headers, admin_headers):
    mpis = client.get("/api/admin/mpis", headers=admin_headers).json()
    docs = client.get("/api/admin/docs", headers=admin_headers).json()
    customers = client.get("/api/customers", headers=engineer_headers).json()
    return len(mpis), len(docs), len(customers)


class TestCreate:

    def test_acme_scenario(self, client, make_mpi, admin_headers, engineer_headers, company):
        mpi = make_mpi()

        assert mpi["jobNumber"] == "U000001"
        assert mpi["mpiNumber"] == "MPI-000001"
        assert mpi["status"] == "draft"
        assert mpi["isActive"] is True
        assert mpi["customerCompany"]["companyName"] == "Acme"
        assert mpi["engineer"]["fullName"] == "Eve Engineer"

        sections = mpi["sections"]
        assert len(sections) == 20
        assert [s["title"] for s in sections] == [title for _, title in DEFAULT_SECTIONS]
        assert [s["order"] for s in sections] == list(range(20))
        assert sections[0]["id"] == "applicable-docs"
        assert sections[17]["title"] == "Final QC, Ship and Delivery"
        assert all(s["content"] == "" and s["images"] == [] for s in sections)

        history = mpi["versionHistory"]
        assert len(history) == 1
        assert history[0]["version"] == "Rev A"
        assert history[0]["description"] == "Initial creation"
        assert history[0]["engineerName"] == "Eve Engineer"

        docs = client.get(f"/api/admin/docs/{mpi['docsId']}", headers=admin_headers).json()
        assert docs["mpiNo"] == "MPI-000001"
        assert docs["jobNo"] == "U000001"

        customers = client.get("/api/customers", headers=engineer_headers).json()
        assert len(customers) == 1
        assert customers[0]["id"] == mpi["customerId"]
        assert customers[0]["customerName"] == "Acme"
        assert customers[0]["assemblyName"] == "Controller Board"
        assert customers[0]["comments"] == "MPI: MPI-000001 - Job: U000001"

    def test_version_entry_uses_given_version(self, make_mpi):
        mpi = make_mpi(mpiVersion="Rev C")
        assert mpi["versionHistory"][0]["version"] == "Rev C"

    def test_form_is_copied_to_docs(self, client, make_mpi, admin_headers, form):
        mpi = make_mpi(formId=form["id"])
        assert mpi["formRev"] == "Rev A"
        docs = client.get(f"/api/admin/docs/{mpi['docsId']}", headers=admin_headers).json()
        assert docs["formId"] == "FORM-001"
        assert docs["formRev"] == "Rev A"

    def test_auto_numbers(self, make_mpi):
        first = make_mpi(jobNumber="AUTO", mpiNumber="AUTO")
        second = make_mpi(jobNumber="auto", mpiNumber="AUTO")
        assert (first["jobNumber"], first["mpiNumber"]) == ("U000001", "MPI-000001")
        assert (second["jobNumber"], second["mpiNumber"]) == ("U000002", "MPI-000002")

    def test_auto_skips_explicit_numbers(self, make_mpi):
        make_mpi(jobNumber="U000001", mpiNumber="MPI-000001")
        mpi = make_mpi(jobNumber="AUTO", mpiNumber="AUTO")
        assert mpi["jobNumber"] == "U000002"

    def test_duplicate_job_number_persists_nothing(
        self, client, make_mpi, company, engineer_headers, admin_headers
    ):
        make_mpi()
        before = _counts(client, engineer_headers, admin_headers)

        response = client.post(
            "/api/mpi",
            json=mpi_payload(company["id"], mpiNumber="MPI-000099", customerAssemblyName="Other Board"),
            headers=engineer_headers,
        )
        assert response.status_code == 409
        assert _counts(client, engineer_headers, admin_headers) == before

    def test_duplicate_mpi_number(self, client, make_mpi, company, engineer_headers):
        make_mpi()
        response = client.post(
            "/api/mpi",
            json=mpi_payload(company["id"], jobNumber="U000050"),
            headers=engineer_headers,
        )
        assert response.status_code == 409

    def test_unknown_company(self, client, engineer_headers, company):
        response = client.post("/api/mpi", json=mpi_payload(999), headers=engineer_headers)
        assert response.status_code == 404

    @pytest.mark.parametrize("missing", ["customerCompanyId", "jobNumber", "mpiNumber"])
    def test_required_fields(self, client, engineer_headers, company, missing):
        payload = mpi_payload(company["id"])
        del payload[missing]
        response = client.post("/api/mpi", json=payload, headers=engineer_headers)
        assert response.status_code == 400

    def test_blank_job_number(self, client, engineer_headers, company):
        response = client.post(
            "/api/mpi", json=mpi_payload(company["id"], jobNumber="  "), headers=engineer_headers
        )
        assert response.status_code == 400

    def test_quantity_must_be_positive(self, client, engineer_headers, company):
        response = client.post(
            "/api/mpi", json=mpi_payload(company["id"], assemblyQuantity=0), headers=engineer_headers
        )
        assert response.status_code == 400

    def test_each_mpi_gets_its_own_customer(self, client, make_mpi, engineer_headers):
        first = make_mpi()
        second = make_mpi(jobNumber="U000002", mpiNumber="MPI-000002", drawingRev="9", assemblyQuantity=25)
        assert first["customerId"] != second["customerId"]
        assert len(client.get("/api/customers", headers=engineer_headers).json()) == 2

        customer = client.get(f"/api/customers/{second['customerId']}", headers=engineer_headers).json()
        assert customer["drawingRev"] == "9"
        assert customer["assemblyQuantity"] == 25
        assert customer["comments"] == "MPI: MPI-000002 - Job: U000002"


class TestOwnership:

    def test_other_engineer_gets_404(self, client, make_mpi, other_engineer_headers):
        mpi = make_mpi()
        assert client.get(f"/api/mpi/{mpi['id']}", headers=other_engineer_headers).status_code == 404
        response = client.put(f"/api/mpi/{mpi['id']}", json={"pages": "9"}, headers=other_engineer_headers)
        assert response.status_code == 404

    def test_other_engineer_cannot_delete(
        self, client, make_mpi, other_engineer_headers, engineer_headers, admin_headers
    ):
        mpi = make_mpi()
        before = _counts(client, engineer_headers, admin_headers)

        response = client.delete(f"/api/mpi/{mpi['id']}", headers=other_engineer_headers)
        assert response.status_code == 404
        assert _counts(client, engineer_headers, admin_headers) == before
        assert client.get(f"/api/mpi/{mpi['id']}", headers=engineer_headers).status_code == 200

    def test_list_is_scoped(self, client, make_mpi, engineer_headers, other_engineer_headers):
        make_mpi()
        make_mpi(headers=other_engineer_headers, jobNumber="U000002", mpiNumber="MPI-000002")
        mine = client.get("/api/mpi", headers=engineer_headers).json()
        assert [m["jobNumber"] for m in mine] == ["U000001"]

    def test_missing_mpi(self, client, engineer_headers):
        assert client.get("/api/mpi/999", headers=engineer_headers).status_code == 404


class TestUpdate:

    def test_partial_update_touches_only_given_keys(self, client, make_mpi, engineer_headers):
        mpi = make_mpi(pages="4", dateReleased="2026-02-01")
        response = client.put(f"/api/mpi/{mpi['id']}", json={"pages": "6"}, headers=engineer_headers)
        assert response.status_code == 200
        updated = response.json()
        assert updated["pages"] == "6"
        assert updated["dateReleased"] == "2026-02-01"
        assert updated["drawingName"] == "CB-100"
        assert len(updated["sections"]) == 20
        assert len(updated["versionHistory"]) == 1

    def test_sections_are_replaced(self, client, make_mpi, engineer_headers):
        mpi = make_mpi()
        sections = [
            {"id": "kitting", "title": "Kitting", "content": "Pull kit", "order": 0},
            {
                "id": "custom-1",
                "title": "Conformal Coat",
                "content": "Coat side B",
                "order": 1,
                "isCollapsed": True,
                "images": ["https://img.example.com/1.png"],
                "documentId": "DOC-100",
            },
        ]
        response = client.put(
            f"/api/mpi/{mpi['id']}", json={"sections": sections}, headers=engineer_headers
        )
        assert response.status_code == 200
        out = response.json()["sections"]
        assert [s["id"] for s in out] == ["kitting", "custom-1"]
        assert out[1]["isCollapsed"] is True
        assert out[1]["images"] == ["https://img.example.com/1.png"]
        assert out[1]["documentId"] == "DOC-100"

    def test_version_change_appends_history(self, client, make_mpi, engineer_headers):
        mpi = make_mpi(mpiVersion="Rev A")
        response = client.put(
            f"/api/mpi/{mpi['id']}", json={"mpiVersion": "Rev B"}, headers=engineer_headers
        )
        history = response.json()["versionHistory"]
        assert [(h["version"], h["description"]) for h in history] == [
            ("Rev A", "Initial creation"),
            ("Rev B", "Revision updated"),
        ]

    def test_same_version_adds_no_history(self, client, make_mpi, engineer_headers):
        mpi = make_mpi(mpiVersion="Rev A")
        response = client.put(
            f"/api/mpi/{mpi['id']}", json={"mpiVersion": "Rev A"}, headers=engineer_headers
        )
        assert len(response.json()["versionHistory"]) == 1

    def test_rename_mpi_number_updates_docs(self, client, make_mpi, engineer_headers, admin_headers):
        mpi = make_mpi()
        response = client.put(
            f"/api/mpi/{mpi['id']}", json={"mpiNumber": "MPI-000777"}, headers=engineer_headers
        )
        assert response.status_code == 200
        assert response.json()["docsId"] == mpi["docsId"]
        docs = client.get(f"/api/admin/docs/{mpi['docsId']}", headers=admin_headers).json()
        assert docs["mpiNo"] == "MPI-000777"

    def test_rename_assembly_updates_customer(self, client, make_mpi, engineer_headers):
        mpi = make_mpi()
        client.put(
            f"/api/mpi/{mpi['id']}",
            json={"customerAssemblyName": "Power Board", "assemblyQuantity": 40},
            headers=engineer_headers,
        )
        customer = client.get(f"/api/customers/{mpi['customerId']}", headers=engineer_headers).json()
        assert customer["assemblyName"] == "Power Board"
        assert customer["assemblyQuantity"] == 40

    def test_update_leaves_other_mpis_customer_alone(self, client, make_mpi, engineer_headers):
        first = make_mpi()
        second = make_mpi(jobNumber="U000002", mpiNumber="MPI-000002", drawingRev="9", assemblyQuantity=25)

        response = client.put(
            f"/api/mpi/{first['id']}",
            json={"customerAssemblyName": "Renamed Board", "assemblyQuantity": 3},
            headers=engineer_headers,
        )
        assert response.status_code == 200

        customer = client.get(f"/api/customers/{second['customerId']}", headers=engineer_headers).json()
        assert customer["assemblyName"] == "Controller Board"
        assert customer["assemblyQuantity"] == 25
        assert customer["drawingRev"] == "9"
        assert customer["comments"] == "MPI: MPI-000002 - Job: U000002"

        renamed = client.get(f"/api/customers/{first['customerId']}", headers=engineer_headers).json()
        assert renamed["assemblyName"] == "Renamed Board"
        assert renamed["assemblyQuantity"] == 3

    def test_switching_form_takes_its_revision(self, client, make_mpi, engineer_headers, admin_headers, form):
        mpi = make_mpi(formId=form["id"])
        other = client.post(
            "/api/admin/forms", json={"formId": "FORM-002", "formRev": "Rev C"}, headers=admin_headers
        ).json()

        response = client.put(f"/api/mpi/{mpi['id']}", json={"formId": other["id"]}, headers=engineer_headers)
        assert response.status_code == 200
        assert response.json()["formRev"] == "Rev C"

        docs = client.get(f"/api/admin/docs/{mpi['docsId']}", headers=admin_headers).json()
        assert docs["formId"] == "FORM-002"
        assert docs["formRev"] == "Rev C"

    def test_rename_into_taken_job_number(self, client, make_mpi, engineer_headers):
        make_mpi()
        second = make_mpi(jobNumber="U000002", mpiNumber="MPI-000002")
        response = client.put(
            f"/api/mpi/{second['id']}", json={"jobNumber": "U000001"}, headers=engineer_headers
        )
        assert response.status_code == 409

    def test_null_on_required_field(self, client, make_mpi, engineer_headers):
        mpi = make_mpi()
        response = client.put(
            f"/api/mpi/{mpi['id']}", json={"drawingName": None}, headers=engineer_headers
        )
        assert response.status_code == 400

    def test_engineer_status_change(self, client, make_mpi, engineer_headers):
        mpi = make_mpi()
        response = client.put(
            f"/api/mpi/{mpi['id']}", json={"status": "in-review"}, headers=engineer_headers
        )
        assert response.json()["status"] == "in-review"


class TestDelete:

    def test_delete_removes_derived_records(self, client, make_mpi, engineer_headers, admin_headers):
        mpi = make_mpi()
        response = client.delete(f"/api/mpi/{mpi['id']}", headers=engineer_headers)
        assert response.status_code == 200

        assert client.get(f"/api/mpi/{mpi['id']}", headers=engineer_headers).status_code == 404
        assert client.get(f"/api/admin/docs/{mpi['docsId']}", headers=admin_headers).status_code == 404
        assert client.get(f"/api/customers/{mpi['customerId']}", headers=engineer_headers).status_code == 404

    def test_other_mpis_customer_survives(self, client, make_mpi, engineer_headers):
        first = make_mpi()
        second = make_mpi(jobNumber="U000002", mpiNumber="MPI-000002")
        client.delete(f"/api/mpi/{first['id']}", headers=engineer_headers)

        response = client.get(f"/api/customers/{second['customerId']}", headers=engineer_headers)
        assert response.status_code == 200
        assert response.json()["comments"] == "MPI: MPI-000002 - Job: U000002"

    def test_number_is_free_after_delete(self, client, make_mpi, engineer_headers):
        mpi = make_mpi()
        client.delete(f"/api/mpi/{mpi['id']}", headers=engineer_headers)
        response = client.post("/api/mpi/job-numbers", headers=engineer_headers)
        assert response.json()["jobNumber"] == "U000001"


class TestAdminMpis:

    def test_admin_sees_every_engineers_mpis(self, client, make_mpi, other_engineer_headers, admin_headers):
        make_mpi()
        make_mpi(headers=other_engineer_headers, jobNumber="U000002", mpiNumber="MPI-000002")
        rows = client.get("/api/admin/mpis", headers=admin_headers).json()
        assert sorted(m["jobNumber"] for m in rows) == ["U000001", "U000002"]

    def test_status_any_enum_value(self, client, make_mpi, admin_headers):
        mpi = make_mpi()
        for status in ("approved", "draft", "archived"):
            response = client.put(
                "/api/admin/mpis", json={"mpiId": mpi["id"], "status": status}, headers=admin_headers
            )
            assert response.status_code == 200
            assert response.json()["status"] == status

    def test_status_outside_enum(self, client, make_mpi, admin_headers):
        mpi = make_mpi()
        response = client.put(
            "/api/admin/mpis", json={"mpiId": mpi["id"], "status": "shipped"}, headers=admin_headers
        )
        assert response.status_code == 400

    def test_status_of_missing_mpi(self, client, admin_headers):
        response = client.put("/api/admin/mpis", json={"mpiId": 999, "status": "approved"}, headers=admin_headers)
        assert response.status_code == 404

    def test_admin_edit_records_admin_name(self, client, make_mpi, admin_headers, engineer_headers):
        mpi = make_mpi(mpiVersion="Rev A")
        response = client.put(
            f"/api/admin/mpis/{mpi['id']}", json={"mpiVersion": "Rev B"}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["versionHistory"][-1]["engineerName"] == "Ada Admin"
        assert response.json()["engineerId"] == mpi["engineerId"]

    def test_engineer_cannot_set_status_as_admin(self, client, make_mpi, engineer_headers):
        mpi = make_mpi()
        response = client.put(
            "/api/admin/mpis", json={"mpiId": mpi["id"], "status": "approved"}, headers=engineer_headers
        )
        assert response.status_code == 403


class TestAdminDocs:

    DOCS = {
        "jobNo": "U000010",
        "mpiNo": "MPI-000010",
        "mpiRev": "Rev A",
        "docId": "DOC-1",
        "formId": "FORM-001",
        "formRev": "Rev A",
    }

    def test_crud(self, client, admin_headers):
        response = client.post("/api/admin/docs", json=self.DOCS, headers=admin_headers)
        assert response.status_code == 201
        docs_id = response.json()["id"]

        response = client.put(
            f"/api/admin/docs/{docs_id}", json={**self.DOCS, "mpiRev": "Rev B"}, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["mpiRev"] == "Rev B"

        assert client.delete(f"/api/admin/docs/{docs_id}", headers=admin_headers).status_code == 200
        assert client.get("/api/admin/docs", headers=admin_headers).json() == []
        assert client.get(f"/api/admin/docs/{docs_id}", headers=admin_headers).json()["isActive"] is False

    def test_required_fields(self, client, admin_headers):
        payload = dict(self.DOCS)
        del payload["formRev"]
        assert client.post("/api/admin/docs", json=payload, headers=admin_headers).status_code == 400

    def test_duplicate_job_or_mpi_number(self, client, admin_headers):
        client.post("/api/admin/docs", json=self.DOCS, headers=admin_headers)
        response = client.post(
            "/api/admin/docs", json={**self.DOCS, "jobNo": "U000011"}, headers=admin_headers
        )
        assert response.status_code == 409


class TestCustomers:

    CUSTOMER = {
        "customerName": "Acme",
        "assemblyName": "Sensor Board",
        "assemblyRev": "A",
        "drawingName": "SB-1",
        "drawingRev": "1",
        "assemblyQuantity": 10,
        "kitReceivedDate": "2026-03-01",
    }

    def test_crud(self, client, engineer_headers):
        response = client.post("/api/customers", json=self.CUSTOMER, headers=engineer_headers)
        assert response.status_code == 201
        customer_id = response.json()["id"]

        response = client.put(
            f"/api/customers/{customer_id}", json={"comments": "rush"}, headers=engineer_headers
        )
        assert response.json()["comments"] == "rush"
        assert response.json()["assemblyName"] == "Sensor Board"

        assert client.delete(f"/api/customers/{customer_id}", headers=engineer_headers).status_code == 200
        assert client.get("/api/customers", headers=engineer_headers).json() == []
        assert client.get(f"/api/customers/{customer_id}", headers=engineer_headers).json()["isActive"] is False

    def test_other_engineers_records_are_hidden(self, client, engineer_headers, other_engineer_headers):
        customer_id = client.post("/api/customers", json=self.CUSTOMER, headers=engineer_headers).json()["id"]
        assert client.get(f"/api/customers/{customer_id}", headers=other_engineer_headers).status_code == 404
        assert client.get("/api/customers", headers=other_engineer_headers).json() == []
