"""
Tests for the HTTP API: routing, gates and error responses.
"""

import jwt


class TestAuthRoutes:

    def test_login(self, client, secret_key):
        resp = client.post("/auth/token", json={"username": "u1", "password": "password1"})
        assert resp.status_code == 200
        payload = jwt.decode(resp.json()["token"], secret_key, algorithms=["HS256"])
        assert payload == {"username": "u1", "isAdmin": False}

    def test_login_bad_password(self, client):
        resp = client.post("/auth/token", json={"username": "u1", "password": "nope"})
        assert resp.status_code == 401

    def test_login_missing_field(self, client):
        resp = client.post("/auth/token", json={"username": "u1"})
        assert resp.status_code == 400

    def test_register_never_admin(self, client, secret_key):
        resp = client.post("/auth/register", json={
            "username": "new",
            "password": "password",
            "firstName": "first",
            "lastName": "last",
            "email": "new@email.com",
        })
        assert resp.status_code == 201
        payload = jwt.decode(resp.json()["token"], secret_key, algorithms=["HS256"])
        assert payload == {"username": "new", "isAdmin": False}

    def test_register_rejects_admin_flag(self, client):
        resp = client.post("/auth/register", json={
            "username": "new",
            "password": "password",
            "firstName": "first",
            "lastName": "last",
            "email": "new@email.com",
            "isAdmin": True,
        })
        assert resp.status_code == 400


class TestCompanyRoutes:

    new_company = {
        "handle": "new",
        "name": "New",
        "logoUrl": "http://new.img",
        "description": "DescNew",
        "numEmployees": 10,
    }

    def test_create_ok_for_admin(self, client, admin_headers):
        resp = client.post("/companies", json=self.new_company, headers=admin_headers)
        assert resp.status_code == 201
        assert resp.json() == {"company": self.new_company}

    def test_create_denied_for_non_admin(self, client, u1_headers):
        resp = client.post("/companies", json=self.new_company, headers=u1_headers)
        assert resp.status_code == 401
        assert resp.json() == {
            "error": {"message": "Must be an administrator to access this route.", "status": 401}
        }

    def test_create_denied_for_anon(self, client):
        resp = client.post("/companies", json=self.new_company)
        assert resp.status_code == 401

    def test_create_with_tampered_token_is_anon(self, client):
        forged = jwt.encode({"username": "admin", "isAdmin": True}, "not-the-secret", algorithm="HS256")
        resp = client.post("/companies", json=self.new_company, headers={"Authorization": f"Bearer {forged}"})
        assert resp.status_code == 401

    def test_create_missing_data(self, client, admin_headers):
        resp = client.post("/companies", json={"handle": "new", "numEmployees": 10}, headers=admin_headers)
        assert resp.status_code == 400

    def test_create_invalid_url(self, client, admin_headers):
        resp = client.post(
            "/companies",
            json={**self.new_company, "logoUrl": "not-a-url"},
            headers=admin_headers,
        )
        assert resp.status_code == 400

    def test_create_duplicate(self, client, admin_headers):
        resp = client.post(
            "/companies",
            json={**self.new_company, "handle": "c1"},
            headers=admin_headers,
        )
        assert resp.status_code == 400
        assert resp.json()["error"]["message"] == "Duplicate company: c1"

    def test_create_duplicate_name(self, client, admin_headers):
        resp = client.post(
            "/companies",
            json={**self.new_company, "name": "C1"},
            headers=admin_headers,
        )
        assert resp.status_code == 400
        assert resp.json()["error"]["message"] == "Duplicate company name: C1"
        assert client.get("/companies/new").status_code == 404

    def test_list_ok_for_anon(self, client):
        resp = client.get("/companies")
        assert resp.status_code == 200
        assert [c["handle"] for c in resp.json()["companies"]] == ["c1", "c2", "c3"]

    def test_list_filtered(self, client):
        resp = client.get("/companies", params={"nameLike": "2"})
        assert resp.json() == {
            "companies": [{
                "handle": "c2",
                "name": "C2",
                "description": "Desc2",
                "numEmployees": 2,
                "logoUrl": "http://c2.img",
            }]
        }

    def test_list_employee_range(self, client):
        resp = client.get("/companies", params={"minEmployees": "2", "maxEmployees": "2"})
        assert [c["handle"] for c in resp.json()["companies"]] == ["c2"]

    def test_list_unknown_filter(self, client):
        resp = client.get("/companies", params={"invalidName": "Steve"})
        assert resp.status_code == 400
        assert "invalidName" in resp.json()["error"]["message"]

    def test_list_min_above_max(self, client):
        resp = client.get("/companies", params={"minEmployees": "5", "maxEmployees": "1"})
        assert resp.status_code == 400

    def test_list_non_numeric_bound(self, client):
        resp = client.get("/companies", params={"minEmployees": "lots"})
        assert resp.status_code == 400

    def test_list_percent_sign_is_literal(self, client):
        resp = client.get("/companies", params={"nameLike": "%"})
        assert resp.status_code == 200
        assert resp.json() == {"companies": []}

    def test_get(self, client):
        resp = client.get("/companies/c1")
        assert resp.status_code == 200
        assert [j["title"] for j in resp.json()["company"]["jobs"]] == ["J1", "J2"]

    def test_get_not_found(self, client):
        resp = client.get("/companies/nope")
        assert resp.status_code == 404
        assert resp.json() == {"error": {"message": "No company: nope", "status": 404}}

    def test_update_for_admin(self, client, admin_headers):
        resp = client.patch("/companies/c1", json={"name": "C1-new"}, headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json()["company"]["name"] == "C1-new"

    def test_update_denied_for_non_admin(self, client, u1_headers):
        resp = client.patch("/companies/c1", json={"name": "C1-new"}, headers=u1_headers)
        assert resp.status_code == 401

    def test_update_empty_body(self, client, admin_headers):
        resp = client.patch("/companies/c1", json={}, headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json()["error"]["message"] == "No data"

    def test_update_handle_not_allowed(self, client, admin_headers):
        resp = client.patch("/companies/c1", json={"handle": "c1-new"}, headers=admin_headers)
        assert resp.status_code == 400

    def test_update_not_found(self, client, admin_headers):
        resp = client.patch("/companies/nope", json={"name": "x"}, headers=admin_headers)
        assert resp.status_code == 404

    def test_update_null_name_rejected(self, client, admin_headers):
        """name and description map to NOT NULL columns."""
        for field in ("name", "description"):
            resp = client.patch("/companies/c1", json={field: None}, headers=admin_headers)
            assert resp.status_code == 400
            assert resp.json()["error"]["message"][0].startswith(f"{field}:")
        assert client.get("/companies/c1").json()["company"]["name"] == "C1"

    def test_update_null_employees_allowed(self, client, admin_headers):
        resp = client.patch(
            "/companies/c1",
            json={"numEmployees": None, "logoUrl": None},
            headers=admin_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["company"]["numEmployees"] is None
        assert resp.json()["company"]["logoUrl"] is None

    def test_update_duplicate_name(self, client, admin_headers):
        resp = client.patch("/companies/c1", json={"name": "C2"}, headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json()["error"]["message"] == "Duplicate company name: C2"

    def test_delete_for_admin(self, client, admin_headers):
        resp = client.delete("/companies/c1", headers=admin_headers)
        assert resp.json() == {"deleted": "c1"}
        assert client.get("/companies/c1").status_code == 404

    def test_delete_denied_for_non_admin(self, client, u1_headers):
        resp = client.delete("/companies/c1", headers=u1_headers)
        assert resp.status_code == 401
        assert client.get("/companies/c1").status_code == 200


class TestJobRoutes:

    def test_create_for_admin(self, client, admin_headers):
        resp = client.post(
            "/jobs",
            json={"title": "New", "salary": 10, "equity": 0.2, "companyHandle": "c1"},
            headers=admin_headers,
        )
        assert resp.status_code == 201
        assert resp.json()["job"]["title"] == "New"

    def test_create_denied_for_non_admin(self, client, u1_headers):
        resp = client.post("/jobs", json={"title": "New", "companyHandle": "c1"}, headers=u1_headers)
        assert resp.status_code == 401

    def test_create_equity_out_of_range(self, client, admin_headers):
        resp = client.post(
            "/jobs",
            json={"title": "New", "equity": 1.5, "companyHandle": "c1"},
            headers=admin_headers,
        )
        assert resp.status_code == 400

    def test_list(self, client):
        resp = client.get("/jobs")
        assert [j["title"] for j in resp.json()["jobs"]] == ["J1", "J2", "J3", "J4"]

    def test_list_has_equity(self, client):
        resp = client.get("/jobs", params={"hasEquity": "true"})
        assert [j["title"] for j in resp.json()["jobs"]] == ["J1", "J2"]

    def test_list_has_equity_false(self, client):
        resp = client.get("/jobs", params={"hasEquity": "false"})
        assert len(resp.json()["jobs"]) == 4

    def test_list_title_and_salary(self, client):
        resp = client.get("/jobs", params={"title": "j", "minSalary": "250"})
        assert [j["title"] for j in resp.json()["jobs"]] == ["J3"]

    def test_list_unknown_filter(self, client):
        resp = client.get("/jobs", params={"maxSalary": "10"})
        assert resp.status_code == 400

    def test_get(self, client):
        job_id = client.get("/jobs").json()["jobs"][0]["id"]
        resp = client.get(f"/jobs/{job_id}")
        assert resp.json()["job"]["company"]["handle"] == "c1"

    def test_get_not_found(self, client):
        assert client.get("/jobs/0").status_code == 404

    def test_update_for_admin(self, client, admin_headers):
        job_id = client.get("/jobs").json()["jobs"][0]["id"]
        resp = client.patch(f"/jobs/{job_id}", json={"title": "J-new"}, headers=admin_headers)
        assert resp.json()["job"]["title"] == "J-new"

    def test_update_company_not_allowed(self, client, admin_headers):
        job_id = client.get("/jobs").json()["jobs"][0]["id"]
        resp = client.patch(f"/jobs/{job_id}", json={"companyHandle": "c2"}, headers=admin_headers)
        assert resp.status_code == 400

    def test_update_null_title_rejected(self, client, admin_headers):
        job_id = client.get("/jobs").json()["jobs"][0]["id"]
        resp = client.patch(f"/jobs/{job_id}", json={"title": None}, headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json()["error"]["message"][0].startswith("title:")

    def test_update_null_salary_allowed(self, client, admin_headers):
        job_id = client.get("/jobs").json()["jobs"][0]["id"]
        resp = client.patch(f"/jobs/{job_id}", json={"salary": None}, headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json()["job"]["salary"] is None

    def test_delete_for_admin(self, client, admin_headers):
        job_id = client.get("/jobs").json()["jobs"][0]["id"]
        resp = client.delete(f"/jobs/{job_id}", headers=admin_headers)
        assert resp.json() == {"deleted": job_id}

    def test_delete_denied_for_anon(self, client):
        job_id = client.get("/jobs").json()["jobs"][0]["id"]
        assert client.delete(f"/jobs/{job_id}").status_code == 401


class TestUserRoutes:

    new_user = {
        "username": "u-new",
        "firstName": "First-new",
        "lastName": "Last-newL",
        "password": "password-new",
        "email": "new@email.com",
        "isAdmin": True,
    }

    def test_create_for_admin(self, client, admin_headers):
        resp = client.post("/users", json=self.new_user, headers=admin_headers)
        assert resp.status_code == 201
        body = resp.json()
        assert body["user"]["isAdmin"] is True
        assert "token" in body

    def test_create_denied_for_non_admin(self, client, u1_headers):
        resp = client.post("/users", json=self.new_user, headers=u1_headers)
        assert resp.status_code == 401

    def test_list_for_admin(self, client, admin_headers):
        resp = client.get("/users", headers=admin_headers)
        assert [u["username"] for u in resp.json()["users"]] == ["admin", "u1"]

    def test_list_denied_for_non_admin(self, client, u1_headers):
        assert client.get("/users", headers=u1_headers).status_code == 401

    def test_get_self(self, client, u1_headers):
        resp = client.get("/users/u1", headers=u1_headers)
        assert resp.status_code == 200
        assert resp.json()["user"]["username"] == "u1"

    def test_get_other_denied(self, client, u1_headers):
        resp = client.get("/users/admin", headers=u1_headers)
        assert resp.status_code == 401
        assert resp.json()["error"]["message"] == (
            "Must be an admin or correct user to access this route."
        )

    def test_get_other_as_admin(self, client, admin_headers):
        assert client.get("/users/u1", headers=admin_headers).status_code == 200

    def test_get_anon_denied(self, client):
        assert client.get("/users/u1").status_code == 401

    def test_update_self(self, client, u1_headers):
        resp = client.patch("/users/u1", json={"firstName": "New"}, headers=u1_headers)
        assert resp.json()["user"]["firstName"] == "New"

    def test_update_self_cannot_grant_admin(self, client, u1_headers):
        resp = client.patch("/users/u1", json={"isAdmin": True}, headers=u1_headers)
        assert resp.status_code == 400

    def test_update_password_then_login(self, client, u1_headers):
        client.patch("/users/u1", json={"password": "changed-pw"}, headers=u1_headers)
        resp = client.post("/auth/token", json={"username": "u1", "password": "changed-pw"})
        assert resp.status_code == 200

    def test_update_null_fields_rejected(self, client, u1_headers):
        for field in ("password", "firstName", "lastName", "email"):
            resp = client.patch("/users/u1", json={field: None}, headers=u1_headers)
            assert resp.status_code == 400
            assert resp.json()["error"]["message"][0].startswith(f"{field}:")
        resp = client.post("/auth/token", json={"username": "u1", "password": "password1"})
        assert resp.status_code == 200

    def test_update_not_found_as_admin(self, client, admin_headers):
        resp = client.patch("/users/nope", json={"firstName": "x"}, headers=admin_headers)
        assert resp.status_code == 404

    def test_delete_self(self, client, u1_headers, admin_headers):
        resp = client.delete("/users/u1", headers=u1_headers)
        assert resp.json() == {"deleted": "u1"}
        assert client.get("/users/u1", headers=admin_headers).status_code == 404

    def test_delete_other_denied(self, client, u1_headers):
        assert client.delete("/users/admin", headers=u1_headers).status_code == 401
