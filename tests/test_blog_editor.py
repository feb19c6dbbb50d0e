"""
Blog post editor: validation, upload-before-write, merges on edit and the
generation guard for superseded operations.
"""

from unittest.mock import MagicMock

import pytest

from brotech_admin.core.errors import AdminError, NotFound, PermissionDenied, ValidationError
from brotech_admin.modules.blog.editor import EditorState, PostEditor, render_markdown

from conftest import ADMIN_EMAIL


def _uploader(url="https://cdn.example.com/blog/1_cover.png"):
    def upload(file_bytes, filename, folder, progress=None):
        progress(0)
        progress(50)
        progress(100)
        return url
    return MagicMock(side_effect=upload)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("title,content,author", [
    ("", "Body", ADMIN_EMAIL),
    ("Title", "   ", ADMIN_EMAIL),
    ("Title", "Body", None),
])
def test_validation_happens_before_any_network_call(title, content, author):
    store = MagicMock()
    uploader = _uploader()
    editor = PostEditor(store, author, uploader=uploader)

    with pytest.raises(ValidationError):
        editor.save(title, content, image=("cover.png", b"png"))

    assert editor.state == EditorState.ERROR
    assert editor.error == "Title and content are required."
    uploader.assert_not_called()
    store.blog_posts.create.assert_not_called()


def test_rejects_unknown_status_and_file_type(store):
    editor = PostEditor(store, ADMIN_EMAIL)
    with pytest.raises(ValidationError):
        editor.save("Title", "Body", status="archived")
    with pytest.raises(ValidationError):
        editor.save("Title", "Body", image=("notes.txt", b"text"))
    assert store.blog_posts.count() == 0


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------

def test_create_sets_author_and_timestamps(store):
    editor = PostEditor(store, ADMIN_EMAIL)
    post_id = editor.save("Hello", "# Hi", status="published")

    post = store.blog_posts.get(post_id)
    assert post["author"] == ADMIN_EMAIL
    assert post["status"] == "published"
    assert post["createdAt"] is not None
    assert post["updatedAt"] is not None
    assert "featureImageUrl" not in post
    assert editor.state == EditorState.IDLE


def test_image_is_uploaded_before_the_write(store):
    uploader = _uploader()
    editor = PostEditor(store, ADMIN_EMAIL, uploader=uploader)

    post_id = editor.save("Hello", "Body", image=("cover.png", b"png-bytes"))

    uploader.assert_called_once()
    args, kwargs = uploader.call_args
    assert args[:3] == (b"png-bytes", "cover.png", "blog")
    assert store.blog_posts.get(post_id)["featureImageUrl"] == "https://cdn.example.com/blog/1_cover.png"
    assert editor.upload_progress is None


def test_progress_is_reported_while_uploading(store):
    seen = []
    editor = PostEditor(store, ADMIN_EMAIL)

    def upload(file_bytes, filename, folder, progress=None):
        for percent in (0, 40, 100):
            progress(percent)
            seen.append((editor.state, editor.upload_progress))
        return "/static/blog/1_cover.png"

    editor.uploader = upload
    editor.save("Hello", "Body", image=("cover.png", b"png"))

    assert seen == [(EditorState.UPLOADING, 0), (EditorState.UPLOADING, 40), (EditorState.UPLOADING, 100)]


def test_failed_upload_aborts_the_save(store):
    uploader = MagicMock(side_effect=PermissionDenied("Image upload was refused by the storage service."))
    editor = PostEditor(store, ADMIN_EMAIL, uploader=uploader)

    with pytest.raises(PermissionDenied):
        editor.save("Hello", "Body", image=("cover.png", b"png"))

    assert store.blog_posts.count() == 0
    assert editor.state == EditorState.ERROR
    assert editor.error == "Image upload was refused by the storage service."


def test_unexpected_upload_errors_are_wrapped(store):
    editor = PostEditor(store, ADMIN_EMAIL, uploader=MagicMock(side_effect=OSError("disk full")))

    with pytest.raises(AdminError) as exc:
        editor.save("Hello", "Body", image=("cover.png", b"png"))

    assert exc.value.message == "Image upload failed. Please try again."
    assert store.blog_posts.count() == 0


# ---------------------------------------------------------------------------
# Edit
# ---------------------------------------------------------------------------

def test_edit_merges_and_keeps_existing_image(store):
    post_id = store.blog_posts.create({
        "title": "Old", "content": "Old body", "status": "draft", "author": "writer@brotech.io",
        "featureImageUrl": "/static/blog/old.png", "views": 12,
    })
    created = store.blog_posts.get(post_id).get("createdAt")

    editor = PostEditor(store, ADMIN_EMAIL, post_id)
    assert editor.state == EditorState.IDLE
    editor.load()
    assert editor.state == EditorState.EDITING
    assert editor.title == "Old"

    editor.save("New", "New body", status="published")

    post = store.blog_posts.get(post_id)
    assert post["title"] == "New"
    assert post["status"] == "published"
    assert post["author"] == ADMIN_EMAIL
    assert post["featureImageUrl"] == "/static/blog/old.png"
    assert post["views"] == 12
    assert post.get("createdAt") == created
    assert post["updatedAt"] is not None


def test_saving_a_post_deleted_while_open_does_not_recreate_it(store):
    post_id = store.blog_posts.create({"title": "Old", "content": "Old body", "status": "draft"})
    editor = PostEditor(store, ADMIN_EMAIL, post_id)
    editor.load()
    store.blog_posts.delete(post_id)

    with pytest.raises(NotFound):
        editor.save("New", "New body")

    assert store.blog_posts.count() == 0
    assert editor.state == EditorState.ERROR
    assert editor.error == "Blog post not found."


def test_load_missing_post(store):
    editor = PostEditor(store, ADMIN_EMAIL, "65f000000000000000000000")
    with pytest.raises(NotFound):
        editor.load()
    assert editor.state == EditorState.ERROR
    assert editor.error == "Blog post not found."


# ---------------------------------------------------------------------------
# Superseded operations
# ---------------------------------------------------------------------------

def test_cancel_during_upload_discards_the_save(store):
    editor = PostEditor(store, ADMIN_EMAIL)

    def upload(file_bytes, filename, folder, progress=None):
        editor.cancel()
        progress(100)
        return "/static/blog/1_cover.png"

    editor.uploader = upload
    assert editor.save("Hello", "Body", image=("cover.png", b"png")) is None

    assert store.blog_posts.count() == 0
    assert editor.state == EditorState.IDLE
    assert editor.upload_progress is None


def test_cancel_during_load_discards_the_result():
    store = MagicMock()
    editor = PostEditor(store, ADMIN_EMAIL, "post-1")

    def get(post_id):
        editor.cancel()
        return {"id": post_id, "title": "Stale", "content": "Stale"}

    store.blog_posts.get.side_effect = get
    assert editor.load() is None
    assert editor.title == ""
    assert editor.state == EditorState.IDLE


# ---------------------------------------------------------------------------
# Preview
# ---------------------------------------------------------------------------

def test_markdown_preview():
    html = render_markdown("# Title\n\nSome **bold** text")
    assert "<h1>Title</h1>" in html
    assert "<strong>bold</strong>" in html
    assert render_markdown(None) == ""
