"""
Blog Admin Routes
=================

Post list, editor pages and the JSON API used by the editor preview.
"""

from flask import flash, jsonify, redirect, render_template, request, url_for

from . import blog_bp
from .editor import PostEditor, render_markdown
from ...core.auth import admin_required, api_admin_required, get_auth
from ...core.errors import AdminError, NotFound, ValidationError, describe_error
from ...core.logging_service import LoggingService
from ...core.store import SERVER_TIMESTAMP, get_store

# ===== Store Helper Functions =====

def get_all_posts(store):
    """All posts, newest first"""
    return store.blog_posts.list(order_by=('createdAt', 'desc'))


def toggle_post_status(store, post_id):
    """Flip a post between draft and published; returns the new status"""
    post = store.blog_posts.get(post_id)
    new_status = 'draft' if post.get('status') == 'published' else 'published'
    store.blog_posts.update(post_id, {'status': new_status, 'updatedAt': SERVER_TIMESTAMP})
    return new_status


def _serialize(post):
    data = dict(post)
    for key in ('createdAt', 'updatedAt'):
        if data.get(key):
            data[key] = data[key].isoformat()
    return data


def _error_response(e):
    if isinstance(e, AdminError):
        return jsonify({'error': describe_error(e)}), e.status_code
    LoggingService.log_error_with_traceback('blog', e)
    return jsonify({'error': describe_error(e)}), 500


def _uploaded_image():
    """(filename, bytes) of the submitted feature image, or None"""
    file = request.files.get('featureImage')
    if not file or file.filename == '':
        return None
    return file.filename, file.read()


# ===== Page Routes =====

@blog_bp.route('/')
@admin_required
def blog_page():
    """Blog post list"""
    try:
        posts = get_all_posts(get_store())
    except Exception as e:
        LoggingService.log_error_with_traceback('blog', e)
        return render_template('blog/blog.html', posts=[], error=describe_error(e))
    return render_template('blog/blog.html', posts=posts, error=None)


@blog_bp.route('/new', methods=['GET', 'POST'])
@blog_bp.route('/edit/<post_id>', methods=['GET', 'POST'])
@admin_required
def editor(post_id=None):
    """Create or edit a post"""
    post_editor = PostEditor(get_store(), get_auth().current_user()['email'], post_id)

    if post_id:
        try:
            post_editor.load()
        except NotFound:
            flash('Blog post not found.', 'error')
            return redirect(url_for('blog.blog_page'))
        except AdminError as e:
            LoggingService.error('blog', f'Failed to load post {post_id}: {e.message}')
            return render_template('blog/editor.html', editor=post_editor, error=describe_error(e))

    if request.method == 'POST':
        try:
            saved_id = post_editor.save(
                request.form.get('title'),
                request.form.get('content'),
                request.form.get('status', 'draft'),
                image=_uploaded_image(),
            )
        except ValidationError as e:
            flash(e.message, 'error')
            return render_template('blog/editor.html', editor=post_editor, error=None)
        except AdminError as e:
            LoggingService.error('blog', f'Failed to save post: {e.message}')
            return render_template('blog/editor.html', editor=post_editor, error=describe_error(e))

        LoggingService.log_user_action('blog', f"saved post '{post_editor.title}' ({saved_id})",
                                       user_id=post_editor.author)
        flash('Post saved.', 'success')
        return redirect(url_for('blog.blog_page'))

    return render_template('blog/editor.html', editor=post_editor, error=None)


@blog_bp.route('/<post_id>/delete', methods=['POST'])
@admin_required
def delete_post(post_id):
    try:
        get_store().blog_posts.delete(post_id)
    except AdminError as e:
        flash(f'Failed to delete post. {e.message}', 'error')
        return redirect(url_for('blog.blog_page'))

    LoggingService.log_user_action('blog', f'deleted post {post_id}')
    flash('Post deleted.', 'success')
    return redirect(url_for('blog.blog_page'))


@blog_bp.route('/<post_id>/toggle-status', methods=['POST'])
@admin_required
def toggle_status_form(post_id):
    try:
        new_status = toggle_post_status(get_store(), post_id)
        flash(f'Post is now {new_status}.', 'success')
    except AdminError as e:
        flash(f'Failed to update post. {e.message}', 'error')
    return redirect(url_for('blog.blog_page'))


# ===== API Routes =====

@blog_bp.route('/api/posts', methods=['GET'])
@api_admin_required
def api_list():
    try:
        return jsonify({'posts': [_serialize(p) for p in get_all_posts(get_store())]})
    except Exception as e:
        return _error_response(e)


@blog_bp.route('/api/posts/<post_id>', methods=['GET'])
@api_admin_required
def api_get(post_id):
    try:
        return jsonify(_serialize(get_store().blog_posts.get(post_id)))
    except Exception as e:
        return _error_response(e)


@blog_bp.route('/api/posts/<post_id>', methods=['DELETE'])
@api_admin_required
def api_delete(post_id):
    try:
        get_store().blog_posts.delete(post_id)
    except Exception as e:
        return _error_response(e)
    return jsonify({'success': True})


@blog_bp.route('/api/posts/<post_id>/toggle-status', methods=['POST'])
@api_admin_required
def api_toggle_status(post_id):
    """Toggle post status between draft and published"""
    try:
        new_status = toggle_post_status(get_store(), post_id)
    except Exception as e:
        return _error_response(e)
    return jsonify({'success': True, 'status': new_status})


@blog_bp.route('/api/preview', methods=['POST'])
@api_admin_required
def api_preview():
    """Render markdown for the live preview"""
    data = request.get_json(silent=True) or {}
    return jsonify({'html': render_markdown(data.get('content', ''))})
