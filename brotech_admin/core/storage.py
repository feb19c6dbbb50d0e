"""
Blob Storage
============

File upload with cloud (S3-compatible Spaces) / local branching.
Uploaded objects are named ``{folder}/{epochMillis}_{originalFilename}`` and
the public URL is returned once the upload has completed.
"""

import logging
import os
import time

from flask import current_app
from werkzeug.utils import secure_filename

from .config import get_config_value
from .errors import PermissionDenied, Unavailable

logger = logging.getLogger(__name__)

CONTENT_TYPES = {
    'jpg': 'image/jpeg', 'jpeg': 'image/jpeg',
    'png': 'image/png', 'gif': 'image/gif', 'webp': 'image/webp',
}

ALLOWED_IMAGE_EXTENSIONS = {'png', 'jpg', 'jpeg', 'gif', 'webp'}

STORAGE_POLICY_GUIDANCE = (
    "The storage key needs write access to the bucket and objects must be "
    "publicly readable. Grant s3:PutObject on '<bucket>/blog/*' and keep the "
    "upload ACL 'public-read'."
)


def is_cloud_storage():
    """Check if using cloud storage"""
    return get_config_value('STORAGE_TYPE', 'local') == 'cloud'


def get_spaces_config():
    """Get S3-compatible Spaces configuration"""
    return {
        'region': get_config_value('SPACES_REGION'),
        'space_name': get_config_value('SPACES_NAME'),
        'access_key': get_config_value('SPACES_KEY'),
        'secret_key': get_config_value('SPACES_SECRET'),
        'folder': get_config_value('SPACES_FOLDER', 'uploads'),
    }


def allowed_image(filename):
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_IMAGE_EXTENSIONS


def build_object_path(folder, filename, now_ms=None):
    """Object path convention: {folder}/{epochMillis}_{originalFilename}"""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{folder}/{now_ms}_{secure_filename(filename) or 'upload'}"


def upload_file(file_bytes, filename, folder, progress=None):
    """Upload file to cloud storage or the local static folder.

    Args:
        file_bytes: Raw bytes of the file.
        filename: Original filename as chosen by the operator.
        folder: Collection folder (e.g. "blog").
        progress: Optional callable receiving percentages 0-100.

    Returns:
        Public URL (cloud) or local path like "/static/blog/1700000000000_a.jpg".
    """
    path = build_object_path(folder, filename)
    if progress:
        progress(0)
    if is_cloud_storage():
        url = _upload_to_spaces(file_bytes, path, progress)
    else:
        url = _save_locally(file_bytes, path)
    if progress:
        progress(100)
    logger.info(f"Uploaded {len(file_bytes)} bytes to {path}")
    return url


def _upload_to_spaces(file_bytes, path, progress=None):
    """Upload to S3-compatible Spaces via boto3."""
    import io

    import boto3
    from botocore.exceptions import BotoCoreError, ClientError

    config = get_spaces_config()
    region = config['region']
    space_name = config['space_name']
    object_key = f"{config['folder']}/{path}"

    ext = path.rsplit('.', 1)[-1].lower() if '.' in path else ''
    content_type = CONTENT_TYPES.get(ext, 'application/octet-stream')

    client = boto3.client(
        's3',
        region_name=region,
        endpoint_url=f"https://{region}.digitaloceanspaces.com",
        aws_access_key_id=config['access_key'],
        aws_secret_access_key=config['secret_key'],
    )

    total = len(file_bytes) or 1
    sent = {'bytes': 0}

    def _callback(chunk):
        sent['bytes'] += chunk
        if progress:
            progress(min(100, sent['bytes'] * 100 / total))

    try:
        client.upload_fileobj(
            io.BytesIO(file_bytes),
            space_name,
            object_key,
            ExtraArgs={'ACL': 'public-read', 'ContentType': content_type},
            Callback=_callback,
        )
    except ClientError as e:
        code = e.response.get('Error', {}).get('Code', '')
        if code in ('AccessDenied', 'InvalidAccessKeyId', 'SignatureDoesNotMatch'):
            raise PermissionDenied('Image upload was refused by the storage service.',
                                   guidance=STORAGE_POLICY_GUIDANCE) from e
        raise Unavailable('Image upload failed. Please try again.') from e
    except BotoCoreError as e:
        raise Unavailable('Image upload failed. Please try again.') from e

    return f"https://{space_name}.{region}.digitaloceanspaces.com/{object_key}"


def _save_locally(file_bytes, path):
    """Save to local static folder."""
    filepath = os.path.join(current_app.static_folder, *path.split('/'))
    os.makedirs(os.path.dirname(filepath), exist_ok=True)
    with open(filepath, 'wb') as f:
        f.write(file_bytes)
    return f"/static/{path}"
