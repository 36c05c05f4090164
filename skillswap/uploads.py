import os
import boto3
from datetime import datetime, timezone
from botocore.config import Config as BotoConfig
from flask import current_app
from werkzeug.utils import secure_filename

from skillswap.errors import ValidationError

LOCAL_URL_PREFIX = '/uploads/'


def is_image(file):
    """Only image MIME types are accepted for profile photos."""
    return bool(file.mimetype) and file.mimetype.startswith('image/')


def _s3_client():
    return boto3.client(
        's3',
        aws_access_key_id=current_app.config['AWS_ACCESS_KEY'],
        aws_secret_access_key=current_app.config['AWS_SECRET_KEY'],
        region_name=current_app.config['AWS_REGION'],
        config=BotoConfig(connect_timeout=5, read_timeout=10, retries={'max_attempts': 3})
    )


def _s3_url_prefix():
    bucket = current_app.config['AWS_BUCKET_NAME']
    region = current_app.config['AWS_REGION']
    return f"https://{bucket}.s3.{region}.amazonaws.com/"


def _photo_filename(file, user_id):
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S%f")
    extension = os.path.splitext(file.filename or '')[1].lower()
    return secure_filename(f"profile-{user_id}-{timestamp}{extension}")


def save_profile_photo(file, user_id):
    """
    Store an uploaded profile photo and return the URL to save on the user.

    Local storage returns a path under /uploads; S3 storage returns the public
    object URL.
    """
    if not is_image(file):
        raise ValidationError('Only image files are allowed')

    filename = _photo_filename(file, user_id)

    if current_app.config['UPLOAD_STORAGE'] == 's3':
        object_name = f"users/{secure_filename(str(user_id))}/{filename}"
        _s3_client().put_object(
            Bucket=current_app.config['AWS_BUCKET_NAME'],
            Key=object_name,
            Body=file.stream,
            ContentType=file.mimetype,
        )
        current_app.logger.debug(f"[DEBUG] Uploaded profile photo to S3: {object_name}")
        return f"{_s3_url_prefix()}{object_name}"

    upload_folder = current_app.config['UPLOAD_FOLDER']
    os.makedirs(upload_folder, exist_ok=True)
    file.save(os.path.join(upload_folder, filename))
    current_app.logger.debug(f"[DEBUG] Saved profile photo locally: {filename}")
    return f"{LOCAL_URL_PREFIX}{filename}"


def delete_profile_photo(url):
    """Remove a previously stored photo; URLs we did not issue are left alone."""
    if not url:
        return

    s3_prefix = _s3_url_prefix()
    if url.startswith(s3_prefix):
        _s3_client().delete_object(
            Bucket=current_app.config['AWS_BUCKET_NAME'],
            Key=url[len(s3_prefix):],
        )
        return

    if url.startswith(LOCAL_URL_PREFIX):
        path = os.path.join(current_app.config['UPLOAD_FOLDER'], os.path.basename(url))
        if os.path.exists(path):
            os.remove(path)
