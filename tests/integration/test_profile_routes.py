import pytest

FAKE_PDF = b"%PDF-1.4\n% fake\n"


async def create(client, name="Lyn Alden"):
    resp = await client.post("/api/profiles", json={"name": name})
    assert resp.status_code == 200
    return resp.json()


async def upload(client, profile_id, files, tags=None):
    data = {"tags": tags} if tags is not None else None
    return await client.post(f"/api/profiles/{profile_id}/files", files=files, data=data)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_and_list(client):
    created = await create(client, "George Gammon")
    assert created == {"id": "George_Gammon", "name": "George Gammon", "files": []}

    await create(client, "Lyn Alden")
    resp = await client.get("/api/profiles")
    assert resp.status_code == 200
    assert resp.json() == [
        {"id": "George_Gammon", "name": "George Gammon"},
        {"id": "Lyn_Alden", "name": "Lyn Alden"},
    ]


@pytest.mark.asyncio
@pytest.mark.integration
@pytest.mark.parametrize("payload", [{}, {"name": ""}, {"name": "   "}])
async def test_create_requires_name(client, payload):
    resp = await client.post("/api/profiles", json=payload)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Name is required"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_duplicate(client):
    await create(client)
    resp = await client.post("/api/profiles", json={"name": "Lyn Alden"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Profile already exists"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_get_unknown_profile(client):
    resp = await client.get("/api/profiles/nobody")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Profile not found"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_upload_text_files_with_tags(client):
    await create(client)

    resp = await upload(
        client,
        "Lyn_Alden",
        files=[
            ("files", ("Fiscal dominance.txt", b"deficits matter", "text/plain")),
            ("files", ("chart.png", b"\x89PNG", "image/png")),
        ],
        tags="debt, fiscal",
    )
    assert resp.status_code == 200
    files = resp.json()["files"]

    assert [f["title"] for f in files] == ["Fiscal dominance", "chart"]
    assert files[0]["type"] == "TXT"
    assert files[0]["content"] == "deficits matter"
    assert files[0]["tags"] == ["debt", "fiscal"]
    assert files[1]["type"] == "OTHER"
    assert files[1]["content"] == ""
    assert files[0]["date"].endswith("+00:00")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_upload_skips_unreadable_documents(client):
    await create(client)

    resp = await upload(
        client,
        "Lyn_Alden",
        files=[
            ("files", ("broken.pdf", b"not a pdf", "application/pdf")),
            ("files", ("notes.txt", b"kept", "text/plain")),
        ],
    )
    assert resp.status_code == 200
    assert [f["title"] for f in resp.json()["files"]] == ["notes"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_upload_without_files(client):
    await create(client)
    resp = await client.post("/api/profiles/Lyn_Alden/files", data={"tags": "x"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "No files uploaded"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_upload_to_unknown_profile(client):
    resp = await upload(client, "nobody", files=[("files", ("a.txt", b"a", "text/plain"))])
    assert resp.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_and_delete_file(client):
    await create(client)
    await upload(
        client,
        "Lyn_Alden",
        files=[
            ("files", ("one.txt", b"1", "text/plain")),
            ("files", ("two.txt", b"2", "text/plain")),
        ],
    )

    resp = await client.put(
        "/api/profiles/Lyn_Alden/files/1",
        json={"date": "2022-02-02T00:00:00.000Z", "tags": ["energy"], "title": "Two (2022)"},
    )
    assert resp.status_code == 200
    assert resp.json()["title"] == "Two (2022)"
    assert resp.json()["tags"] == ["energy"]

    resp = await client.put("/api/profiles/Lyn_Alden/files/7", json={"title": "x"})
    assert resp.status_code == 404
    assert resp.json()["detail"] == "File not found"

    resp = await client.delete("/api/profiles/Lyn_Alden/files/0")
    assert resp.json() == {"success": True}

    profile = (await client.get("/api/profiles/Lyn_Alden")).json()
    assert [f["title"] for f in profile["files"]] == ["Two (2022)"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_compile_profile_pdf(client):
    await create(client)
    await upload(client, "Lyn_Alden", files=[("files", ("one.txt", b"1", "text/plain"))])

    resp = await client.get("/api/profiles/Lyn_Alden/compile", params={"includeAI": "true", "format": "3"})
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert resp.headers["content-disposition"] == 'attachment; filename="Lyn_Alden_compiled.pdf"'
    assert resp.content == FAKE_PDF


@pytest.mark.asyncio
@pytest.mark.integration
async def test_compile_unknown_profile(client):
    resp = await client.get("/api/profiles/nobody/compile")
    assert resp.status_code == 404
