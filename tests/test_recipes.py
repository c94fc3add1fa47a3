from bson.objectid import ObjectId

MISSING = str(ObjectId())


def add_recipe(db, titulo, ingredientes, preparo="misture tudo"):
    result = db["receitas"].insert_one({"titulo": titulo, "preparo": preparo, "ingredientes": ingredientes})
    return str(result.inserted_id)


def test_create_and_list(client):
    body = {"titulo": "Bolo", "preparo": "asse", "ingredientes": "farinha, ovos"}
    resp = client.post("/receitas", json=body)
    assert resp.status_code == 201
    created = resp.json()
    assert created["titulo"] == "Bolo"
    assert "id" in created

    resp = client.get("/receitas")
    assert resp.status_code == 200
    assert resp.json() == [created]


def test_get_recipe(client, db):
    rid = add_recipe(db, "Bolo", "farinha")
    resp = client.get(f"/receitas/{rid}")
    assert resp.status_code == 200
    assert resp.json()["id"] == rid
    assert resp.json()["ingredientes"] == "farinha"


def test_get_recipe_missing(client):
    assert client.get(f"/receitas/{MISSING}").status_code == 404
    assert client.get("/receitas/nope").status_code == 404


def test_delete_recipe(client, db):
    rid = add_recipe(db, "Bolo", "farinha")
    assert client.delete(f"/receitas/{rid}").status_code == 204
    assert db["receitas"].count_documents({}) == 0
    assert client.delete(f"/receitas/{rid}").status_code == 404


def test_delete_by_ingredients_is_exact_match(client, db):
    add_recipe(db, "Bolo", "farinha")
    add_recipe(db, "Pão", "farinha, fermento")
    add_recipe(db, "Omelete", "ovos")

    assert client.delete("/receitas/muitas/farinha").status_code == 204
    assert sorted(r["titulo"] for r in db["receitas"].find()) == ["Omelete", "Pão"]

    # nothing matches, still a success
    assert client.delete("/receitas/muitas/chocolate").status_code == 204


def test_update_recipe_overwrites_all_fields(client, db):
    rid = add_recipe(db, "Bolo", "farinha")
    resp = client.put(f"/receitas/{rid}", json={"titulo": "Bolo de cenoura", "preparo": "asse 40min", "ingredientes": "cenoura"})
    assert resp.status_code == 200
    assert resp.json() == "Receita atualizada!"

    recipe = db["receitas"].find_one({"_id": ObjectId(rid)})
    assert recipe["titulo"] == "Bolo de cenoura"
    assert recipe["preparo"] == "asse 40min"
    assert recipe["ingredientes"] == "cenoura"


def test_update_recipe_absent_fields_become_null(client, db):
    rid = add_recipe(db, "Bolo", "farinha")
    assert client.put(f"/receitas/{rid}", json={"titulo": "Só título"}).status_code == 200

    recipe = db["receitas"].find_one({"_id": ObjectId(rid)})
    assert recipe["titulo"] == "Só título"
    assert recipe["preparo"] is None
    assert recipe["ingredientes"] is None


def test_update_recipe_missing(client):
    body = {"titulo": "x", "preparo": "y", "ingredientes": "z"}
    assert client.put(f"/receitas/{MISSING}", json=body).status_code == 404
    assert client.put("/receitas/nope", json=body).status_code == 404


def test_update_by_ingredients_case_insensitive_substring(client, db):
    add_recipe(db, "Bolo", "Farinha, ovos")
    add_recipe(db, "Pão", "farinha integral")
    add_recipe(db, "Omelete", "ovos")

    resp = client.put("/receitas/muitas/FARINHA", json={"titulo": "Massa"})
    assert resp.status_code == 200
    titles = sorted(r["titulo"] for r in db["receitas"].find())
    assert titles == ["Massa", "Massa", "Omelete"]

    assert client.put("/receitas/muitas/chocolate", json={"titulo": "x"}).status_code == 200


def test_update_recipe_without_body(client, db):
    rid = add_recipe(db, "Bolo", "farinha")
    assert client.put(f"/receitas/{rid}").status_code == 200

    recipe = db["receitas"].find_one({"_id": ObjectId(rid)})
    assert recipe["titulo"] is None
    assert recipe["preparo"] is None
    assert recipe["ingredientes"] is None

    assert client.put(f"/receitas/{MISSING}").status_code == 404


def test_update_by_ingredients_without_body(client, db):
    add_recipe(db, "Bolo", "farinha")
    assert client.put("/receitas/muitas/farinha").status_code == 200
    assert db["receitas"].find_one({})["titulo"] is None
