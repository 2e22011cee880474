"""End-to-end tests through the FastAPI routers."""


def persons_url(family):
    return f"/api/v1/families/{family['id']}/persons"


def add_person(client, family, name, **fields):
    response = client.post(persons_url(family), json={"name": name, **fields})
    assert response.status_code == 201, response.text
    return response.json()


def update_person(client, family, person, **changes):
    body = {k: v for k, v in person.items() if k not in ("id", "familyId")}
    body.update(changes)
    return client.put(f"{persons_url(family)}/{person['id']}", json=body)


def list_people(client, family):
    return {p["id"]: p for p in client.get(persons_url(family)).json()}


class TestHealth:
    def test_healthz(self, client):
        assert client.get("/healthz").json() == {"status": "ok"}

    def test_version(self, client):
        assert client.get("/version").json()["name"] == "FamilyGraphAPI"


class TestFamilies:
    def test_create_list_delete(self, client, family):
        second = client.post("/api/v1/families", json={"name": "Kovač", "notes": "maternal"}).json()

        listed = client.get("/api/v1/families").json()
        assert [f["id"] for f in listed] == [second["id"], family["id"]]

        assert client.delete(f"/api/v1/families/{family['id']}").status_code == 200
        assert client.get(f"/api/v1/families/{family['id']}").status_code == 404

    def test_name_required(self, client):
        assert client.post("/api/v1/families", json={"name": ""}).status_code == 422


class TestPersonEdits:
    def test_create_with_defaults(self, client, family):
        person = add_person(client, family, "Ana Horvat")

        assert person["parent"] == 0 and person["spouse"] == 0
        assert person["gender"] == "M"
        assert person["familyId"] == family["id"]

    def test_reference_fields_are_normalized(self, client, family):
        person = add_person(client, family, "Ana", parent=None, parent2="x", spouse=-3, divorced=True)

        assert (person["parent"], person["parent2"], person["spouse"]) == (0, 0, 0)
        assert person["divorced"] is False

    def test_null_and_numeric_fields_are_coerced(self, client, family):
        person = add_person(client, family, "Ana", gender=None, birthYear=1950, deathYear=None, photo=None, isPinned=None)

        assert person["gender"] == "M"
        assert (person["birthYear"], person["deathYear"], person["photo"]) == ("1950", "", "")
        assert person["isPinned"] is False

    def test_unknown_family(self, client):
        response = client.post("/api/v1/families/99/persons", json={"name": "Ghost"})

        assert response.status_code == 404
        assert response.json()["detail"] == "Family 99 not found"

    def test_dangling_parent_rejected(self, client, family):
        response = client.post(persons_url(family), json={"name": "Orphan", "parent": 123})

        assert response.status_code == 400
        assert "does not exist" in response.json()["detail"]

    def test_self_reference_rejected(self, client, family):
        ana = add_person(client, family, "Ana")

        response = update_person(client, family, ana, spouse=ana["id"])

        assert response.status_code == 400
        assert response.json()["detail"] == "Spouse cannot be the person being edited"

    def test_duplicate_parent_rejected(self, client, family):
        ana = add_person(client, family, "Ana")

        response = client.post(persons_url(family), json={"name": "Kid", "parent": ana["id"], "parent2": ana["id"]})

        assert response.status_code == 400

    def test_cycle_rejected_and_not_written(self, client, family):
        grandpa = add_person(client, family, "Grandpa")
        dad = add_person(client, family, "Dad", parent=grandpa["id"])
        kid = add_person(client, family, "Kid", parent=dad["id"])

        response = update_person(client, family, grandpa, parent=kid["id"])

        assert response.status_code == 400
        assert "cycle" in response.json()["detail"]
        assert list_people(client, family)[grandpa["id"]]["parent"] == 0

    def test_update_missing_person(self, client, family):
        response = client.put(f"{persons_url(family)}/999", json={"name": "Nobody"})

        assert response.status_code == 404


class TestSpouseSync:
    def test_spouse_written_on_both_sides(self, client, family):
        ana = add_person(client, family, "Ana")
        bero = add_person(client, family, "Bero", spouse=ana["id"], divorced=True)

        people = list_people(client, family)
        assert people[ana["id"]]["spouse"] == bero["id"]
        assert people[ana["id"]]["divorced"] is True

    def test_remarriage_clears_former_spouse(self, client, family):
        ana = add_person(client, family, "Ana")
        bero = add_person(client, family, "Bero", spouse=ana["id"])
        ceda = add_person(client, family, "Ceda")

        update_person(client, family, list_people(client, family)[bero["id"]], spouse=ceda["id"])

        people = list_people(client, family)
        assert people[ana["id"]]["spouse"] == 0
        assert people[bero["id"]]["spouse"] == ceda["id"]
        assert people[ceda["id"]]["spouse"] == bero["id"]


class TestDelete:
    def test_delete_clears_references(self, client, family):
        ana = add_person(client, family, "Ana")
        bero = add_person(client, family, "Bero", spouse=ana["id"])
        kid = add_person(client, family, "Kid", parent=ana["id"], parent2=bero["id"])

        assert client.delete(f"{persons_url(family)}/{ana['id']}").status_code == 200

        people = list_people(client, family)
        assert ana["id"] not in people
        assert people[kid["id"]]["parent"] == 0
        assert people[kid["id"]]["parent2"] == bero["id"]
        assert people[bero["id"]]["spouse"] == 0

    def test_delete_missing(self, client, family):
        assert client.delete(f"{persons_url(family)}/999").status_code == 404


class TestRelationships:
    def test_add_and_remove_parent_of(self, client, family):
        mum = add_person(client, family, "Mum")
        kid = add_person(client, family, "Kid")
        url = f"/api/v1/families/{family['id']}/relationships/parent-of"

        added = client.post(url, json={"parentId": mum["id"], "childId": kid["id"]})
        assert added.status_code == 200
        assert added.json()["parent"] == mum["id"]

        removed = client.request("DELETE", url, json={"parentId": mum["id"], "childId": kid["id"]})
        assert removed.json()["parent"] == 0

    def test_parent_of_cycle_rejected(self, client, family):
        mum = add_person(client, family, "Mum")
        kid = add_person(client, family, "Kid", parent=mum["id"])
        url = f"/api/v1/families/{family['id']}/relationships/parent-of"

        response = client.post(url, json={"parentId": kid["id"], "childId": mum["id"]})

        assert response.status_code == 400

    def test_parent_of_rejects_non_positive_ids(self, client, family):
        kid = add_person(client, family, "Kid")
        url = f"/api/v1/families/{family['id']}/relationships/parent-of"

        response = client.post(url, json={"parentId": -5, "childId": kid["id"]})

        assert response.status_code == 422
        assert list_people(client, family)[kid["id"]]["parent"] == 0


class TestTree:
    def build(self, client, family):
        ana = add_person(client, family, "Ana Horvat")
        bero = add_person(client, family, "Bero Horvat", spouse=ana["id"])
        kid = add_person(client, family, "Ceda Horvat", parent=ana["id"], parent2=bero["id"])
        stranger = add_person(client, family, "Ivo Kovač")
        return ana, bero, kid, stranger

    def test_full_tree(self, client, family):
        self.build(client, family)

        tree = client.get(f"/api/v1/families/{family['id']}/tree", params={"mode": "all"}).json()

        persons = [n for n in tree["nodes"] if n.get("category") != "Marriage"]
        assert len(persons) == 4
        assert any(n.get("category") == "Marriage" for n in tree["nodes"])
        assert tree["converged"] is True

    def test_focused_tree(self, client, family):
        ana, bero, kid, stranger = self.build(client, family)

        tree = client.get(
            f"/api/v1/families/{family['id']}/tree",
            params={"focusId": kid["id"], "mode": "ancestors", "maxDepth": 1},
        ).json()

        keys = {n["key"] for n in tree["nodes"]}
        assert {ana["id"], bero["id"], kid["id"]} <= keys
        assert stranger["id"] not in keys

    def test_bad_mode(self, client, family):
        response = client.get(f"/api/v1/families/{family['id']}/tree", params={"mode": "sideways"})

        assert response.status_code == 422

    def test_tag_filter(self, client, family):
        ana, bero, kid, stranger = self.build(client, family)
        tags_url = f"/api/v1/families/{family['id']}/tags"
        tag = client.post(tags_url, json={"name": "Kovač line"}).json()
        empty = client.post(tags_url, json={"name": "Unused"}).json()
        client.put(f"{persons_url(family)}/{stranger['id']}/tags", json={"tagIds": [tag["id"]]})

        tree = client.get(f"/api/v1/families/{family['id']}/tree", params={"tagId": tag["id"]}).json()
        assert [n["key"] for n in tree["nodes"]] == [stranger["id"]]

        tree = client.get(f"/api/v1/families/{family['id']}/tree", params={"tagId": empty["id"]}).json()
        assert tree == {"nodes": [], "links": [], "converged": True}

    def test_unknown_tag(self, client, family):
        response = client.get(f"/api/v1/families/{family['id']}/tree", params={"tagId": 77})

        assert response.status_code == 404


class TestTransfer:
    def test_export_import_round_trip(self, client, family):
        ana = add_person(client, family, "Ana Horvat", birthYear="1950")
        bero = add_person(client, family, "Bero Horvat", spouse=ana["id"], divorced=True)
        kid = add_person(client, family, "Ceda Horvat", parent=ana["id"], parent2=bero["id"])
        tag = client.post(f"/api/v1/families/{family['id']}/tags", json={"name": "core"}).json()
        client.put(f"{persons_url(family)}/{kid['id']}/tags", json={"tagIds": [tag["id"]]})

        exported = client.get(f"/api/v1/families/{family['id']}/export").json()
        target = client.post("/api/v1/families", json={"name": "Copy"}).json()
        result = client.post(f"{persons_url(target)}/import", json=exported).json()

        assert result["inserted"] == 3
        assert result["warnings"] == []
        people = {p["name"]: p for p in result["people"]}
        assert people["Ceda Horvat"]["parent"] == people["Ana Horvat"]["id"]
        assert people["Ceda Horvat"]["parent2"] == people["Bero Horvat"]["id"]
        assert people["Ana Horvat"]["spouse"] == people["Bero Horvat"]["id"]
        assert people["Ana Horvat"]["divorced"] is True
        assert people["Ana Horvat"]["birthYear"] == "1950"
        links = client.get(f"/api/v1/families/{target['id']}/tag-links").json()
        assert [l["personId"] for l in links] == [people["Ceda Horvat"]["id"]]

    def test_import_list_drops_bad_relations(self, client, family):
        records = [
            {"id": 1, "name": "A", "parent": 2},
            {"id": 2, "name": "B", "parent": 1},
            {"id": 3, "name": "C", "parent": 50},
            {"id": 4, "name": ""},
        ]

        result = client.post(f"{persons_url(family)}/import", json=records).json()

        assert result["inserted"] == 3
        people = {p["name"]: p for p in result["people"]}
        assert people["A"]["parent"] == people["B"]["id"]
        assert people["B"]["parent"] == 0
        assert people["C"]["parent"] == 0
        assert any("cycle" in w for w in result["warnings"])

    def test_import_accepts_null_and_numeric_fields(self, client, family):
        records = [
            {"id": 1, "name": "Ana", "birthYear": 1950},
            {"id": 2, "name": "Bero", "photo": None, "gender": None},
            {"id": 3, "name": "Ceda", "parent": 1, "parent2": 2},
        ]

        result = client.post(f"{persons_url(family)}/import", json=records).json()

        assert result["inserted"] == 3
        assert result["warnings"] == []
        people = {p["name"]: p for p in result["people"]}
        assert people["Ana"]["birthYear"] == "1950"
        assert people["Bero"]["gender"] == "M"
        assert people["Bero"]["photo"] == ""
        assert people["Ceda"]["parent"] == people["Ana"]["id"]
        assert people["Ceda"]["parent2"] == people["Bero"]["id"]

    def test_unsupported_format(self, client, family):
        response = client.post(f"{persons_url(family)}/import", json={"schemaVersion": "1"})

        assert response.status_code == 400
