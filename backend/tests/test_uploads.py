DOCX_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


class TestUploads:
    def test_upload_pdf(self, client, tmp_data):
        r = client.post("/api/uploads", files={"file": ("resume.pdf", b"%PDF-1.4 content", "application/pdf")})
        assert r.status_code == 201
        data = r.json()
        assert data["originalName"] == "resume.pdf"
        assert data["size"] == len(b"%PDF-1.4 content")
        assert data["mediaType"] == "application/pdf"
        assert data["fileUrl"] == f"/api/uploads/{data['filename']}"
        assert (tmp_data / "uploads" / data["filename"]).exists()

    def test_allowed_types(self, client):
        cases = [
            ("cv.doc", "application/msword"),
            ("cv.docx", DOCX_TYPE),
            ("cv.tex", "application/octet-stream"),
            ("cv.tex", "text/x-tex"),
        ]
        for i, (name, media_type) in enumerate(cases):
            r = client.post("/api/uploads", files={"file": (name, f"content {i}".encode(), media_type)})
            assert r.status_code == 201, (name, media_type)

    def test_rejected_type(self, client):
        r = client.post("/api/uploads", files={"file": ("photo.png", b"\x89PNG", "image/png")})
        assert r.status_code == 400
        assert r.json()["detail"] == "Only PDF, DOC, DOCX and TEX files are allowed"

    def test_file_too_large(self, client):
        big = b"x" * (5 * 1024 * 1024 + 1)
        r = client.post("/api/uploads", files={"file": ("big.pdf", big, "application/pdf")})
        assert r.status_code == 400
        assert r.json()["detail"] == "File size cannot exceed 5MB"

    def test_empty_file(self, client):
        r = client.post("/api/uploads", files={"file": ("empty.pdf", b"", "application/pdf")})
        assert r.status_code == 400

    def test_missing_file(self, client):
        r = client.post("/api/uploads", data={"note": "nothing attached"})
        assert r.status_code == 400

    def test_same_file_uploaded_twice(self, client):
        first = client.post("/api/uploads", files={"file": ("cv.pdf", b"same bytes", "application/pdf")})
        second = client.post("/api/uploads", files={"file": ("cv.pdf", b"same bytes", "application/pdf")})
        assert second.status_code == 201
        assert first.json()["fileUrl"] == second.json()["fileUrl"]

    def test_download(self, client):
        r = client.post("/api/uploads", files={"file": ("cv.pdf", b"downloadable", "application/pdf")})
        download = client.get(r.json()["fileUrl"])
        assert download.status_code == 200
        assert download.content == b"downloadable"

    def test_download_missing(self, client):
        r = client.get("/api/uploads/nothing-here.pdf")
        assert r.status_code == 404


class TestCVUpload:
    def test_cv_upload_returns_analysis(self, client, fake_reviewer):
        source = rb"\section{Research} Work on parsers was very good for my growth."
        r = client.post("/api/cv/upload", files={"cvFile": ("cv.tex", source, "application/x-tex")})
        assert r.status_code == 200
        data = r.json()
        assert data["analysis"]["score"] == 72
        assert data["analysis"]["feedback"] == ["Tighten the opening paragraph."]
        assert data["fileUrl"] == data["file"]["fileUrl"]
        assert fake_reviewer.calls[0] == ("Research Work on parsers was very good for my growth.", "CV/Resume")

    def test_cv_upload_rejects_other_types(self, client):
        r = client.post("/api/cv/upload", files={"cvFile": ("cv.txt", b"plain", "text/plain")})
        assert r.status_code == 400


class TestHealth:
    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "ok"
