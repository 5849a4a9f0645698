"""API tests for /api/projects."""

from app.models import Podcast, Project, ProjectDocument
from tests.factories import OTHER_USER_ID, USER_ID, make_document


def _create(client, **payload):
    return client.post("/api/projects", json=payload)


class TestProjectCrud:
    def test_create_trims_fields(self, client):
        response = _create(client, name="  Season One  ", description="   ")

        assert response.status_code == 201
        body = response.json()
        assert body["name"] == "Season One"
        assert body["description"] is None
        assert body["user_id"] == USER_ID

    def test_name_is_required(self, client, store):
        assert _create(client, name="   ").status_code == 400
        response = _create(client, description="no name")

        assert response.status_code == 400
        assert response.json() == {"error": "Project name is required"}
        assert store.tables["projects"].rows == []

    def test_list_only_returns_own_projects(self, client, store):
        store.tables["projects"].seed(Project(user_id=OTHER_USER_ID, name="Theirs"))
        _create(client, name="Mine")

        names = [p["name"] for p in client.get("/api/projects").json()]

        assert names == ["Mine"]

    def test_get_includes_owned_documents(self, client, store):
        project = _create(client, name="P").json()
        mine = make_document()
        theirs = make_document(user_id=OTHER_USER_ID)
        store.tables["documents"].seed(mine, theirs)
        store.tables["project_documents"].seed(
            ProjectDocument(project_id=project["id"], document_id=mine.id),
            ProjectDocument(project_id=project["id"], document_id=theirs.id),
        )

        body = client.get(f"/api/projects/{project['id']}").json()

        assert [d["id"] for d in body["documents"]] == [mine.id]

    def test_get_foreign_project_is_not_found(self, client, store):
        other = Project(user_id=OTHER_USER_ID, name="Theirs")
        store.tables["projects"].seed(other)

        response = client.get(f"/api/projects/{other.id}")

        assert response.status_code == 404
        assert response.json() == {"error": "Project not found"}

    def test_update_is_partial(self, client):
        project = _create(client, name="Old", description="keep me").json()

        response = client.put(f"/api/projects/{project['id']}", json={"name": " New "})

        assert response.status_code == 200
        assert response.json()["name"] == "New"
        assert response.json()["description"] == "keep me"

    def test_update_rejects_blank_name(self, client):
        project = _create(client, name="Old").json()

        response = client.put(f"/api/projects/{project['id']}", json={"name": ""})

        assert response.status_code == 400

    def test_update_unknown_project(self, client):
        assert client.put("/api/projects/missing", json={"name": "x"}).status_code == 404

    def test_delete_removes_links_and_detaches_podcasts(self, client, store):
        project = _create(client, name="Gone soon").json()
        store.tables["project_documents"].seed(ProjectDocument(project_id=project["id"], document_id="d1"))
        store.tables["podcasts"].seed(Podcast(user_id=USER_ID, project_id=project["id"], name="Ep"))

        response = client.delete(f"/api/projects/{project['id']}")

        assert response.status_code == 200
        assert store.tables["projects"].rows == []
        assert store.tables["project_documents"].rows == []
        assert store.tables["podcasts"].rows[0].project_id is None

    def test_delete_unknown_project(self, client):
        assert client.delete("/api/projects/missing").status_code == 404


class TestProjectDocuments:
    def test_replace_supersedes_previous_set(self, client, store):
        project = _create(client, name="P").json()
        a, b, c = make_document(), make_document(), make_document()
        store.tables["documents"].seed(a, b, c)
        url = f"/api/projects/{project['id']}/documents"

        assert client.post(url, json={"documentIds": [a.id, b.id]}).json() == {"success": True}
        response = client.post(url, json={"documentIds": [c.id]})

        assert response.status_code == 200
        linked = [row.document_id for row in store.tables["project_documents"].rows]
        assert linked == [c.id]

    def test_empty_set_is_rejected_and_links_survive(self, client, store):
        project = _create(client, name="P").json()
        doc = make_document()
        store.tables["documents"].seed(doc)
        url = f"/api/projects/{project['id']}/documents"
        client.post(url, json={"documentIds": [doc.id]})

        for body in ({"documentIds": []}, {"documentIds": "not-a-list"}, {}):
            response = client.post(url, json=body)
            assert response.status_code == 400
            assert response.json() == {"error": "documentIds array is required"}

        assert [row.document_id for row in store.tables["project_documents"].rows] == [doc.id]

    def test_foreign_document_is_forbidden(self, client, store):
        project = _create(client, name="P").json()
        mine = make_document()
        theirs = make_document(user_id=OTHER_USER_ID)
        store.tables["documents"].seed(mine, theirs)

        response = client.post(
            f"/api/projects/{project['id']}/documents", json={"documentIds": [mine.id, theirs.id]}
        )

        assert response.status_code == 403
        assert store.tables["project_documents"].rows == []

    def test_unknown_project(self, client):
        response = client.post("/api/projects/missing/documents", json={"documentIds": ["d1"]})

        assert response.status_code == 404
