API = "/api/v1"


async def test_reset_schemes_endpoint(client):
    response = await client.post(f"{API}/scheme/reset-defaults")
    assert response.status_code == 200
    body = response.json()
    assert sorted(s["report_type"] for s in body) == ["A_EOT", "A_MID", "O_EOT", "O_MID"]
    assert all(s["total_weight"] == 100 for s in body)

    response = await client.get(f"{API}/scheme/O_EOT")
    assert response.status_code == 200
    assert [c["weight_out_of"] for c in response.json()["components"]] == [10, 10, 80]


async def test_missing_scheme_is_404(client):
    response = await client.get(f"{API}/scheme/A_MID")
    assert response.status_code == 404


async def test_upsert_scheme_endpoint(client):
    created = await client.post(f"{API}/assessment/", json={"name": "Test 1", "code": " t1 "})
    assert created.status_code == 201
    assessment = created.json()
    assert assessment["code"] == "T1"

    response = await client.put(
        f"{API}/scheme/O_MID",
        json={"name": "Single test", "components": [{"assessment_id": assessment["id"], "weight_out_of": 100}]},
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Single test"


async def test_duplicate_assessment_code_conflicts(client):
    await client.post(f"{API}/assessment/", json={"name": "Midterm", "code": "MID"})
    response = await client.post(f"{API}/assessment/", json={"name": "Midterm again", "code": "mid"})
    assert response.status_code == 409


async def test_mark_entry_and_subject_total(client, o_level_subjects):
    schemes = (await client.post(f"{API}/scheme/reset-defaults")).json()
    o_mid = next(s for s in schemes if s["report_type"] == "O_MID")
    ca1, ca2 = (c["assessment_id"] for c in o_mid["components"])
    subject_id = o_level_subjects[0].id
    base = {"student_id": 1, "academic_year_id": 2025, "term_id": 1, "subject_id": subject_id}

    response = await client.patch(
        f"{API}/mark/batch",
        json={"marks": [
            {**base, "assessment_id": ca1, "score": "80"},
            {**base, "assessment_id": ca2, "score": ""},
        ]},
    )
    assert response.status_code == 200
    assert response.json()["updated_count"] == 1
    assert response.json()["skipped_count"] == 1

    response = await client.get(
        f"{API}/report/o-level/subject-total",
        params={"student_id": 1, "academic_year_id": 2025, "term_id": 1, "report_type": "O_MID", "subject_id": subject_id},
    )
    assert response.status_code == 200
    assert response.json()["total"] == 40

    mark = await client.get(f"{API}/mark/", params={**base, "assessment_id": ca1})
    assert mark.json()["score100"] == 80


async def test_invalid_mark_is_rejected(client, o_level_subjects):
    response = await client.patch(
        f"{API}/mark/batch",
        json={"marks": [{
            "student_id": 1, "academic_year_id": 2025, "term_id": 1,
            "assessment_id": 1, "subject_id": o_level_subjects[0].id, "score": "abc",
        }]},
    )
    assert response.status_code == 400


async def test_wrong_level_report_type_is_400(client):
    response = await client.get(
        f"{API}/report/a-level/paper-score",
        params={"student_id": 1, "academic_year_id": 2025, "term_id": 1, "report_type": "O_MID", "subject_id": 1, "paper_id": 1},
    )
    assert response.status_code == 400


async def test_remark_seed_pick_and_override(client):
    first = await client.post(f"{API}/remark/rules/seed")
    second = await client.post(f"{API}/remark/rules/seed")
    assert first.json()["created"] == 44
    assert second.json()["created"] == 0

    picked = await client.post(
        f"{API}/remark/pick", json={"target": "teacher", "report_type": "O_EOT", "grade": "B"}
    )
    assert picked.json()["text"] == "Very good results. Maintain your effort."

    key = {"student_id": 3, "academic_year_id": 2025, "term_id": 1, "report_type": "O_EOT"}
    assert (await client.get(f"{API}/remark/override", params=key)).status_code == 404

    saved = await client.put(f"{API}/remark/override", json={**key, "teacher_remark": "Custom text"})
    assert saved.status_code == 200
    fetched = await client.get(f"{API}/remark/override", params=key)
    assert fetched.json()["teacher_remark"] == "Custom text"
    assert fetched.json()["head_teacher_comment"] is None


async def test_create_range_rule_validation(client):
    response = await client.post(
        f"{API}/remark/rules",
        json={"target": "teacher", "report_type": "O_MID", "match_type": "range", "min": 90, "max": 10, "text": "x"},
    )
    assert response.status_code == 422


async def test_report_card_endpoint(client, o_level_subjects):
    schemes = (await client.post(f"{API}/scheme/reset-defaults")).json()
    o_mid = next(s for s in schemes if s["report_type"] == "O_MID")
    ca1, ca2 = (c["assessment_id"] for c in o_mid["components"])
    base = {"student_id": 9, "academic_year_id": 2025, "term_id": 1, "subject_id": o_level_subjects[0].id}
    await client.patch(
        f"{API}/mark/batch",
        json={"marks": [{**base, "assessment_id": ca1, "score": 80}, {**base, "assessment_id": ca2, "score": 60}]},
    )

    response = await client.get(
        f"{API}/report/card/9", params={"academic_year_id": 2025, "term_id": 1, "report_type": "O_MID"}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["overall"] == 70
    assert body["grade"] == "B"
    assert body["remarks"]["teacher_remark"] == "Very good performance. Aim even higher."


async def test_a_level_report_card_built_through_api(client):
    created = await client.post(f"{API}/subject/", json={"name": "Chemistry", "code": "che", "level": "A"})
    assert created.status_code == 201
    subject = created.json()
    assert subject["code"] == "CHE"

    response = await client.post(
        f"{API}/subject/{subject['id']}/papers",
        json={"papers": [{"name": "Paper 1", "sort_order": 1}, {"name": "Paper 2", "sort_order": 2}]},
    )
    assert response.status_code == 200
    paper1, paper2 = (p["id"] for p in response.json()["papers"])

    assessments = (await client.post(f"{API}/assessment/reset-defaults")).json()
    ids = {a["code"]: a["id"] for a in assessments}
    base = {"student_id": 4, "academic_year_id": 2025, "term_id": 3, "subject_id": subject["id"]}
    await client.patch(
        f"{API}/mark/batch",
        json={"marks": [
            {**base, "paper_id": paper1, "assessment_id": ids["MID"], "score": 70},
            {**base, "paper_id": paper1, "assessment_id": ids["EOT"], "score": 80},
            {**base, "paper_id": paper2, "assessment_id": ids["MID"], "score": 60},
        ]},
    )

    response = await client.get(
        f"{API}/report/card/4", params={"academic_year_id": 2025, "term_id": 3, "report_type": "A_EOT"}
    )

    assert response.status_code == 200
    body = response.json()
    papers = body["a_level_subjects"][0]["papers"]
    assert [p["final"] for p in papers] == [75, None]
    assert papers[1]["note"] == "Incomplete"
    assert body["overall"] == 75
    assert body["grade"] == "B"
    assert body["remarks"]["teacher_remark"] == "Very good results. Keep the effort."
    assert body["remarks"]["head_teacher_comment"] == "Very good. Keep improving."


async def test_inactive_subject_leaves_report_card(client):
    subject = (await client.post(f"{API}/subject/", json={"name": "History", "level": "O"})).json()
    listed = await client.get(f"{API}/subject/", params={"level": "O", "active_only": True})
    assert [s["name"] for s in listed.json()] == ["History"]

    response = await client.patch(f"{API}/subject/{subject['id']}/active", json={"is_active": False})
    assert response.json()["is_active"] is False

    card = await client.get(
        f"{API}/report/card/1", params={"academic_year_id": 2025, "term_id": 1, "report_type": "O_MID"}
    )
    assert card.json()["o_level_subjects"] == []
    assert card.json()["grade"] == "X"


async def test_pick_remark_grade_is_case_insensitive(client):
    await client.post(f"{API}/remark/rules/seed")
    picked = await client.post(
        f"{API}/remark/pick", json={"target": "teacher", "report_type": "O_EOT", "grade": " b "}
    )
    assert picked.json()["text"] == "Very good results. Maintain your effort."
