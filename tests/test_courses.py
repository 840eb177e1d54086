import asyncio
import io

from app.courses.database import enroll_user


def add_course(client, title="Python 101", with_video=True):
    files = {"imageLink": ("cover.png", io.BytesIO(b"\x89PNG"), "image/png")}
    if with_video:
        files["videoLink"] = ("intro.mp4", io.BytesIO(b"video"), "video/mp4")
    return client.post(
        "/auth/addCourse",
        data={"title": title, "description": "Basics", "lvlOfDiff": "intermediate", "userId": "u1"},
        files=files,
    )


def test_add_course_uploads_media(client, media):
    response = add_course(client)
    assert response.status_code == 201
    course = response.json()["data"]
    assert course["level"] == "intermediate"
    assert course["published"] is False
    assert course["image_link"].startswith("https://media.test/image/Course_")
    assert course["video_link"].startswith("https://media.test/video/Course_")
    assert [u["resource_type"] for u in media.uploads] == ["image", "video"]


def test_add_course_needs_both_files(client, media):
    response = add_course(client, with_video=False)
    assert response.status_code == 400
    assert response.json()["message"] == "Both image and video files are required."
    assert media.uploads == []


def test_add_course_duplicate_title(client):
    add_course(client)
    response = add_course(client)
    assert response.status_code == 409
    assert response.json()["message"] == "Course already Exist"


def test_add_course_bad_level(client):
    response = client.post(
        "/auth/addCourse",
        data={"title": "X", "description": "Y", "lvlOfDiff": "expert"},
        files={
            "imageLink": ("a.png", io.BytesIO(b"a"), "image/png"),
            "videoLink": ("a.mp4", io.BytesIO(b"a"), "video/mp4"),
        },
    )
    assert response.status_code == 400


def test_list_and_get_courses(client):
    course = add_course(client).json()["data"]
    add_course(client, title="Go 101")

    assert len(client.get("/auth/getAllCourse").json()["data"]) == 2
    assert client.get(f"/auth/getCourse/{course['course_id']}").json()["data"]["title"] == "Python 101"
    assert len(client.get("/auth/getAllCourse/u1").json()["data"]) == 2
    assert client.get("/auth/getAllCourse/u2").json()["data"] == []


def test_get_missing_course(client):
    response = client.get("/auth/getCourse/COURSE_NOPE")
    assert response.status_code == 404
    assert response.json()["message"] == "Can't Find Course"


def test_enroll_is_idempotent(client, db):
    course = add_course(client).json()["data"]
    body = {"id": course["course_id"], "userID": "u7"}

    first = client.post("/auth/AddEnrolledCourse", json=body).json()
    second = client.post("/auth/AddEnrolledCourse", json=body).json()

    assert first["message"] == "Course Enrolled"
    assert second["message"] == "Course already Enrolled"
    assert second["data"]["enrollment_id"] == first["data"]["enrollment_id"]
    assert len(db.enrolled_courses.docs) == 1

    enrolled = client.get("/auth/getEnrolledCourse/u7").json()["data"]
    assert [e["course_id"] for e in enrolled] == [course["course_id"]]


def test_enroll_in_unknown_course(client):
    response = client.post("/auth/AddEnrolledCourse", json={"id": "COURSE_NOPE", "userID": "u7"})
    assert response.status_code == 404


def test_enroll_race_returns_existing_record(db):
    enrollments = db.enrolled_courses.unique("user_id", "course_id")
    first, created = asyncio.run(enroll_user(db, "COURSE_A", "u7"))
    assert created is True

    # The second request misses the record on its first lookup
    lookups = []
    real_find_one = enrollments.find_one

    async def stale_once(query=None):
        lookups.append(query)
        return None if len(lookups) == 1 else await real_find_one(query)

    enrollments.find_one = stale_once
    second, created = asyncio.run(enroll_user(db, "COURSE_A", "u7"))

    assert created is False
    assert second["enrollment_id"] == first["enrollment_id"]
    assert len(enrollments.docs) == 1
