def test_topics_flow(client):
    assert client.get("/auth/topics").status_code == 404

    first = client.post(
        "/auth/createtopics",
        json={"topicTitle": "Python", "subTopicTitle": "Variables", "subTopicContent": "x = 1"},
    )
    assert first.status_code == 201
    topic = first.json()["data"]
    client.post("/auth/createtopics", json={"topicTitle": "Python", "subTopicTitle": "Loops"})
    client.post("/auth/createtopics", json={"topicTitle": "Git", "subTopicTitle": "Commits"})

    titles = client.get("/auth/topics").json()["data"]
    assert titles == ["Python", "Git"]

    subtopics = client.get(f"/auth/topics/{topic['topic_id']}").json()["data"]
    assert [s["sub_topic_title"] for s in subtopics] == ["Variables", "Loops"]


def test_subtopics_share_their_topic_id(client):
    python = client.post("/auth/createtopics", json={"topicTitle": "Python", "subTopicTitle": "Loops"}).json()["data"]
    functions = client.post("/auth/createtopics", json={"topicTitle": " Python ", "subTopicTitle": "Functions"}).json()["data"]
    git = client.post("/auth/createtopics", json={"topicTitle": "Git", "subTopicTitle": "Commits"}).json()["data"]

    assert functions["topic_id"] == python["topic_id"]
    assert git["topic_id"] != python["topic_id"]

    subtopics = client.get(f"/auth/topics/{python['topic_id']}").json()["data"]
    assert [s["sub_topic_title"] for s in subtopics] == ["Loops", "Functions"]


def test_caller_supplied_topic_id(client):
    client.post("/auth/createtopics", json={"TopicId": 7, "topicTitle": "Rust", "subTopicTitle": "Ownership"})
    client.post("/auth/createtopics", json={"TopicId": 7, "topicTitle": "Rust", "subTopicTitle": "Borrowing"})

    subtopics = client.get("/auth/topics/7").json()["data"]
    assert [s["sub_topic_title"] for s in subtopics] == ["Ownership", "Borrowing"]


def test_topic_requires_titles(client):
    response = client.post("/auth/createtopics", json={"topicTitle": "Python"})
    assert response.status_code == 400
    assert response.json()["success"] is False
