"""
Blog Post Editor
================

Persistence flow for creating and editing a blog post:

    idle -> loading-existing -> editing -> [uploading-image] -> saving -> idle

Any failure moves the editor to the error state.

Validation happens before anything touches the network. When a feature
image is attached it is uploaded first and the post is only written once
the upload returned its URL; a failed upload never writes the post.

Every load/save bumps a generation counter. A result that comes back after
the editor moved on (cancelled, or a newer operation started) is dropped.
"""

import logging

import markdown

from ...core.errors import AdminError, NotFound, ValidationError
from ...core.storage import allowed_image, upload_file
from ...core.store import SERVER_TIMESTAMP

logger = logging.getLogger(__name__)

BLOG_FOLDER = 'blog'
POST_STATUSES = ('draft', 'published')


class EditorState:
    IDLE = 'idle'
    LOADING = 'loading-existing'
    EDITING = 'editing'
    UPLOADING = 'uploading-image'
    SAVING = 'saving'
    ERROR = 'error'


def render_markdown(content):
    """HTML preview of the post body"""
    return markdown.markdown(content or '', extensions=['fenced_code', 'tables'])


class PostEditor:
    """Editor for one blog post, new or existing.

    Args:
        store: RecordStore to read and write ``blogPosts``.
        author: email of the signed-in operator, stored as the post author.
        post_id: id of the post to edit; None creates a new post.
        uploader: callable ``(bytes, filename, folder, progress) -> url``.
    """

    def __init__(self, store, author, post_id=None, uploader=upload_file):
        self.store = store
        self.author = author
        self.post_id = post_id
        self.uploader = uploader

        self.state = EditorState.IDLE if post_id else EditorState.EDITING
        self.title = ''
        self.content = ''
        self.status = 'draft'
        self.feature_image_url = None
        self.upload_progress = None
        self.error = None
        self._generation = 0

    @property
    def is_editing(self):
        return bool(self.post_id)

    @property
    def preview_html(self):
        return render_markdown(self.content)

    def _begin(self, state):
        self._generation += 1
        self.state = state
        self.error = None
        return self._generation

    def _is_current(self, generation):
        return generation == self._generation

    def _fail(self, message):
        self.state = EditorState.ERROR
        self.error = message
        self.upload_progress = None

    def cancel(self):
        """Leave the editor; anything still in flight is discarded"""
        self._generation += 1
        self.state = EditorState.IDLE
        self.upload_progress = None

    def load(self):
        """Fetch the existing post into the editor fields"""
        if not self.is_editing:
            return None
        generation = self._begin(EditorState.LOADING)
        try:
            post = self.store.blog_posts.get(self.post_id)
        except NotFound:
            if self._is_current(generation):
                self._fail('Blog post not found.')
            raise
        except AdminError:
            if self._is_current(generation):
                self._fail('Failed to load the blog post. Please try again.')
            raise

        if not self._is_current(generation):
            logger.debug(f"Discarding stale load of post {self.post_id}")
            return None

        self.title = post.get('title', '')
        self.content = post.get('content', '')
        self.status = post.get('status', 'draft')
        self.feature_image_url = post.get('featureImageUrl') or None
        self.state = EditorState.EDITING
        return post

    def _on_progress(self, generation):
        def report(percent):
            if self._is_current(generation):
                self.upload_progress = percent
        return report

    def save(self, title, content, status='draft', image=None):
        """Validate, upload the image if any, then write the post.

        Args:
            image: optional ``(filename, bytes)`` for a new feature image.

        Returns:
            The post id, or None when the save was superseded.
        """
        title = (title or '').strip()
        content = content or ''
        self.title, self.content, self.status = title, content, status
        if not title or not content.strip() or not self.author:
            self._fail('Title and content are required.')
            raise ValidationError('Title and content are required.')
        if status not in POST_STATUSES:
            self._fail('Status must be draft or published.')
            raise ValidationError('Status must be draft or published.')
        if image and not allowed_image(image[0]):
            self._fail('Invalid file type. Use PNG, JPG, GIF or WEBP.')
            raise ValidationError('Invalid file type. Use PNG, JPG, GIF or WEBP.')

        feature_image_url = self.feature_image_url if self.is_editing and not image else None

        if image:
            filename, file_bytes = image
            generation = self._begin(EditorState.UPLOADING)
            self.upload_progress = 0
            try:
                feature_image_url = self.uploader(
                    file_bytes, filename, BLOG_FOLDER, progress=self._on_progress(generation))
            except AdminError as e:
                if self._is_current(generation):
                    self._fail(e.message)
                raise
            except Exception as e:
                logger.error(f"Feature image upload failed: {e}")
                if self._is_current(generation):
                    self._fail('Image upload failed. Please try again.')
                raise AdminError('Image upload failed. Please try again.') from e
            if not self._is_current(generation):
                logger.debug("Discarding save superseded during upload")
                return None
            self.state = EditorState.SAVING
        else:
            generation = self._begin(EditorState.SAVING)

        data = {
            'title': title,
            'content': content,
            'status': status,
            'author': self.author,
            'updatedAt': SERVER_TIMESTAMP,
        }
        if feature_image_url:
            data['featureImageUrl'] = feature_image_url

        try:
            if self.is_editing:
                # Must not recreate a post deleted while it was open
                self.store.blog_posts.update(self.post_id, data)
                post_id = self.post_id
            else:
                data['createdAt'] = SERVER_TIMESTAMP
                post_id = self.store.blog_posts.create(data)
        except AdminError as e:
            if self._is_current(generation):
                self._fail(e.message if e.status_code in (403, 404) else
                           'Failed to save the post. Please check your permissions and try again.')
            raise

        if not self._is_current(generation):
            return None

        self.post_id = post_id
        self.feature_image_url = feature_image_url
        self.upload_progress = None
        self.state = EditorState.IDLE
        return post_id
