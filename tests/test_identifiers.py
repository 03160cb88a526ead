"""
Tests for job number / MPI number allocation.
"""

from datetime import date

from models import MPI
from utils.code_generator import is_auto, next_free_code, next_job_number, next_mpi_number


def _store_mpi(db, job_number, mpi_number):
    db.add(MPI(
        job_number=job_number,
        mpi_number=mpi_number,
        engineer_id=1,
        customer_company_id=1,
        customer_assembly_name="Board",
        assembly_rev="A",
        drawing_name="D-1",
        drawing_rev="1",
        assembly_quantity=1,
        kit_received_date=date(2026, 1, 1),
        status="draft",
        is_active=True,
    ))
    db.commit()


class TestAllocator:

    def test_first_numbers(self, db):
        assert next_job_number(db) == "U000001"
        assert next_mpi_number(db) == "MPI-000001"

    def test_no_reservation(self, db):
        assert next_job_number(db) == next_job_number(db) == "U000001"

    def test_skips_used_numbers(self, db):
        _store_mpi(db, "U000001", "MPI-000001")
        _store_mpi(db, "U000002", "MPI-000002")
        assert next_job_number(db) == "U000003"
        assert next_mpi_number(db) == "MPI-000003"

    def test_fills_gaps(self, db):
        _store_mpi(db, "U000001", "MPI-000001")
        _store_mpi(db, "U000003", "MPI-000003")
        assert next_job_number(db) == "U000002"
        assert next_mpi_number(db) == "MPI-000002"

    def test_ignores_other_formats(self, db):
        _store_mpi(db, "JOB-77", "MPI-7")
        assert next_job_number(db) == "U000001"
        assert next_mpi_number(db) == "MPI-000001"

    def test_custom_prefix_and_width(self, db):
        _store_mpi(db, "X01", "M-1")
        assert next_free_code(db, MPI, "job_number", prefix="X", width=2) == "X02"

    def test_is_auto(self):
        assert is_auto("AUTO")
        assert is_auto(" auto ")
        assert not is_auto("U000001")
        assert not is_auto(None)


class TestAllocatorEndpoints:

    def test_job_number_endpoint_does_not_reserve(self, client, engineer_headers):
        first = client.post("/api/mpi/job-numbers", headers=engineer_headers)
        second = client.post("/api/mpi/job-numbers", headers=engineer_headers)
        assert first.status_code == 200
        assert first.json() == second.json() == {"jobNumber": "U000001"}

    def test_mpi_number_endpoint(self, client, engineer_headers, make_mpi):
        make_mpi()
        response = client.post("/api/mpi/mpi-numbers", headers=engineer_headers)
        assert response.json() == {"mpiNumber": "MPI-000002"}

    def test_admin_may_allocate(self, client, admin_headers):
        response = client.post("/api/mpi/job-numbers", headers=admin_headers)
        assert response.status_code == 200

    def test_list_my_job_numbers(self, client, engineer_headers, other_engineer_headers, make_mpi):
        make_mpi(oldJobNumber="OLD-1")
        make_mpi(jobNumber="U000002", mpiNumber="MPI-000002", oldJobNumber="OLD-1")
        make_mpi(headers=other_engineer_headers, jobNumber="U000003", mpiNumber="MPI-000003")

        response = client.get("/api/mpi/job-numbers", headers=engineer_headers)
        assert response.status_code == 200
        data = response.json()
        assert sorted(data["jobNumbers"]) == ["U000001", "U000002"]
        assert data["oldJobNumbers"] == ["OLD-1"]
