class TestNotifications:
    def _ingest(self, client, document_id, student_id="s1", document_type="sop"):
        r = client.post("/api/uploads", files={"file": ("doc.tex", rb"Plain text that was very good.", "application/x-tex")})
        r = client.post("/api/documents/student-submission", json={
            "documentId": document_id,
            "documentName": f"Doc {document_id}",
            "documentType": document_type,
            "studentId": student_id,
            "studentName": "Ada Student",
            "fileUrl": r.json()["fileUrl"],
        })
        assert r.status_code == 201
        return r.json()

    def test_end_to_end_example(self, client):
        doc = self._ingest(client, "d1")
        assert doc["type"] == "Statement of Purpose"

        r = client.post("/api/documents/d1/edits", json={
            "edits": [{"text": "x", "position": 0}], "mentorName": "Grace Mentor", "mentorId": "m1",
        })
        assert r.status_code == 200
        assert len(client.get("/api/documents/d1").json()["mentorEdits"]) == 1

        r = client.post("/api/documents/d1/feedback", json={"feedbackComments": "Nice work"})
        assert r.json()["status"] == "completed"

        r = client.get("/api/documents/notifications/s1")
        assert r.status_code == 200
        notifications = r.json()
        assert len(notifications) == 1
        n = notifications[0]
        assert n["id"] == "notification-d1"
        assert n["documentId"] == "d1"
        assert n["documentName"] == "Doc d1"
        assert n["mentorName"] == "Grace Mentor"
        assert n["commentsAdded"] == 1
        assert n["editsAccepted"] == 0
        assert n["isRead"] is False
        assert n["feedbackComments"] == "Nice work"
        assert n["fileEdited"] is False
        assert n["hasEditedFile"] is False

    def test_only_completed_documents_of_student(self, client):
        self._ingest(client, "done")
        self._ingest(client, "pending")
        self._ingest(client, "other-student", student_id="s2")
        client.post("/api/documents/done/feedback", json={})
        client.post("/api/documents/other-student/feedback", json={})

        notifications = client.get("/api/documents/notifications/s1").json()
        assert [n["documentId"] for n in notifications] == ["done"]

    def test_counts_split_accepted_and_direct_edits(self, client):
        doc = self._ingest(client, "d1")
        client.post("/api/documents/d1/edits", json={
            "edits": [{"text": "a", "position": 0}, {"text": "b", "position": 1}],
        })
        client.post("/api/documents/d1/suggestions", json={
            "suggestionId": doc["suggestions"][0]["id"], "accepted": True, "mentorName": "Last Mentor",
        })
        client.post("/api/documents/d1/feedback", json={})

        n = client.get("/api/documents/notifications/s1").json()[0]
        assert n["editsAccepted"] == 1
        assert n["commentsAdded"] == 2
        assert n["editsAccepted"] + n["commentsAdded"] == len(client.get("/api/documents/d1").json()["mentorEdits"])
        assert n["mentorName"] == "Last Mentor"
        assert n["date"] == client.get("/api/documents/d1").json()["updatedAt"]

    def test_placeholder_mentor_and_file_flags(self, client):
        self._ingest(client, "d1")
        client.post(
            "/api/documents/edited-document",
            files={"editedFile": ("revised.pdf", b"%PDF-1.4 revised", "application/pdf")},
            data={"documentId": "d1", "mentorId": "m1"},
        )
        client.post("/api/documents/d1/feedback", json={})

        n = client.get("/api/documents/notifications/s1").json()[0]
        assert n["mentorName"] == "Your Mentor"
        assert n["fileEdited"] is True
        assert n["hasEditedFile"] is True
        assert n["editedFileUrl"].startswith("/api/uploads/")
        assert n["fileUrl"].startswith("/api/uploads/")

    def test_blank_student_id(self, client):
        r = client.get("/api/documents/notifications/%20")
        assert r.status_code == 400

    def test_no_notifications(self, client):
        r = client.get("/api/documents/notifications/nobody")
        assert r.status_code == 200
        assert r.json() == []
