import os
import secrets
import time

from flask import current_app
from werkzeug.utils import secure_filename
from smart_library.utils.errors import APIError

ALLOWED_EXTENSIONS = {'jpeg', 'jpg', 'png', 'gif', 'webp'}


def allowed_file(filename):
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS


def _file_size(file_storage):
    stream = file_storage.stream
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(0)
    return size


def save_upload(file_storage, subfolder, prefix='file'):
    """
    Store an uploaded image under UPLOAD_FOLDER/<subfolder>.

    Returns the public path (/uploads/<subfolder>/<name>) to keep on the model.
    """
    filename = secure_filename(file_storage.filename or '')
    if not filename or not allowed_file(filename):
        raise APIError('Only image files are allowed (jpeg, jpg, png, gif, webp)')

    max_bytes = current_app.config['MAX_UPLOAD_MB'] * 1024 * 1024
    if _file_size(file_storage) > max_bytes:
        raise APIError(f"File size too large. Maximum size is {current_app.config['MAX_UPLOAD_MB']}MB")

    extension = filename.rsplit('.', 1)[1].lower()
    stored_name = f'{prefix}-{int(time.time() * 1000)}-{secrets.randbelow(10 ** 9)}.{extension}'

    directory = os.path.join(current_app.config['UPLOAD_FOLDER'], subfolder)
    os.makedirs(directory, exist_ok=True)
    file_storage.save(os.path.join(directory, stored_name))

    return f'/uploads/{subfolder}/{stored_name}'


def delete_upload(public_path):
    """Remove a file previously returned by save_upload; missing files are ignored"""
    if not public_path or not public_path.startswith('/uploads/'):
        return False

    relative = public_path[len('/uploads/'):]
    full_path = os.path.join(current_app.config['UPLOAD_FOLDER'], *relative.split('/'))
    if os.path.exists(full_path):
        os.remove(full_path)
        return True
    return False
