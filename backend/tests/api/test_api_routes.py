"""
API tests for the conversion and job endpoints.
"""

import time

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.services.pipeline.jobs import JOB_STORE


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def vcf_bytes(make_vcf):
    return make_vcf(
        ["alice", "bob"],
        [
            ("chr1", 100, "AT", "A,--", ["1", "0"]),
            ("chr1", 200, "G", "GC", [".", "1"]),
        ],
    ).encode()


def wait_for(client, job_id, statuses, attempts=100):
    for _ in range(attempts):
        body = client.get(f"/api/v1/jobs/{job_id}").json()
        if body["status"] in statuses:
            return body
        time.sleep(0.02)
    raise AssertionError(f"job {job_id} never reached {statuses}")


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "service": "VCF2FASTA"}


class TestConvertEndpoint:

    def test_convert_returns_fasta_download(self, client, vcf_bytes):
        response = client.post(
            "/api/v1/convert/",
            files={"file": ("cohort.vcf", vcf_bytes, "text/plain")},
            data={"sample_names": "alice bob"},
        )
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert 'filename="output.fasta"' in response.headers["content-disposition"]
        assert response.text == ">alice\nA-N-\n>bob\nATGC\n>ref\nATG-\n"

    def test_sample_count_mismatch(self, client, vcf_bytes):
        response = client.post(
            "/api/v1/convert/",
            files={"file": ("cohort.vcf", vcf_bytes, "text/plain")},
            data={"sample_names": "alice bob carol"},
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Found 2 samples, but 3 names were given."

    def test_compressed_upload_rejected(self, client, vcf_bytes):
        response = client.post(
            "/api/v1/convert/",
            files={"file": ("cohort.vcf.gz", vcf_bytes, "application/gzip")},
            data={"sample_names": "alice bob"},
        )
        assert response.status_code == 400
        assert "Compressed" in response.json()["detail"]

    def test_wrong_extension_rejected(self, client, vcf_bytes):
        response = client.post(
            "/api/v1/convert/",
            files={"file": ("cohort.txt", vcf_bytes, "text/plain")},
            data={"sample_names": "alice bob"},
        )
        assert response.status_code == 400


class TestJobEndpoints:

    def test_job_lifecycle(self, client, vcf_bytes):
        response = client.post(
            "/api/v1/jobs/",
            files={"file": ("cohort.vcf", vcf_bytes, "text/plain")},
            data={"sample_names": "alice bob"},
        )
        assert response.status_code == 202
        job_id = response.json()["job_id"]

        body = wait_for(client, job_id, {"completed", "failed", "canceled"})
        assert body["status"] == "completed"
        assert body["progress"] == 1.0
        assert body["result_url"] == f"/api/v1/jobs/{job_id}/result"

        result = client.get(body["result_url"])
        assert result.status_code == 200
        assert result.text == ">alice\nA-N-\n>bob\nATGC\n>ref\nATG-\n"

    def test_failed_job_has_no_result(self, client, vcf_bytes):
        response = client.post(
            "/api/v1/jobs/",
            files={"file": ("cohort.vcf", vcf_bytes, "text/plain")},
            data={"sample_names": "alice"},
        )
        job_id = response.json()["job_id"]

        body = wait_for(client, job_id, {"completed", "failed", "canceled"})
        assert body["status"] == "failed"
        assert "1 names were given" in body["error"]

        result = client.get(f"/api/v1/jobs/{job_id}/result")
        assert result.status_code == 409

    def test_delete_discards_finished_job(self, client, vcf_bytes):
        response = client.post(
            "/api/v1/jobs/",
            files={"file": ("cohort.vcf", vcf_bytes, "text/plain")},
            data={"sample_names": "alice bob"},
        )
        job_id = response.json()["job_id"]
        wait_for(client, job_id, {"completed", "failed", "canceled"})
        assert client.get(f"/api/v1/jobs/{job_id}/result").status_code == 200

        deleted = client.delete(f"/api/v1/jobs/{job_id}")
        assert deleted.status_code == 200
        assert deleted.json()["status"] == "completed"
        assert deleted.json()["result_url"] is None

        assert JOB_STORE.get(job_id) is None
        assert client.get(f"/api/v1/jobs/{job_id}").status_code == 404
        assert client.get(f"/api/v1/jobs/{job_id}/result").status_code == 404

    def test_empty_sample_names(self, client, vcf_bytes):
        response = client.post(
            "/api/v1/jobs/",
            files={"file": ("cohort.vcf", vcf_bytes, "text/plain")},
            data={"sample_names": "   "},
        )
        assert response.status_code == 400

    def test_unknown_job(self, client):
        assert client.get("/api/v1/jobs/does-not-exist").status_code == 404
        assert client.delete("/api/v1/jobs/does-not-exist").status_code == 404
        assert client.get("/api/v1/jobs/does-not-exist/result").status_code == 404
