from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from loguru import logger
from smart_library import db
from smart_library.models.content import GalleryImage
from smart_library.utils.decorators import admin_required, get_current_admin
from smart_library.utils.errors import APIError
from smart_library.utils.helpers import parse_bool
from smart_library.utils.responses import success_response, error_response
from smart_library.utils.uploads import save_upload, delete_upload

gallery_bp = Blueprint('gallery', __name__)

MAX_FILES_PER_UPLOAD = 10


def _base_url():
    return request.host_url.rstrip('/')


@gallery_bp.route('/', methods=['GET'])
def get_gallery():
    """
    Active gallery images with absolute URLs
    ---
    Query parameters:
    - category: only images in this category
    """
    query = GalleryImage.query.filter_by(is_active=True)
    if request.args.get('category'):
        query = query.filter_by(category=request.args['category'])

    images = query.order_by(GalleryImage.display_order.asc(), GalleryImage.created_at.desc()).all()
    return success_response({'images': [image.to_dict(_base_url()) for image in images]})


@gallery_bp.route('/upload', methods=['POST'])
@jwt_required()
@admin_required
def upload_image():
    """Multipart upload of a single `image` with optional title/description/category/display_order"""
    try:
        image = request.files.get('image')
        if not image or not image.filename:
            return error_response('No image file provided', 400)

        gallery_image = GalleryImage(
            title=request.form.get('title'),
            description=request.form.get('description'),
            category=request.form.get('category') or 'general',
            display_order=int(request.form.get('display_order') or 0),
            image_path=save_upload(image, 'gallery', prefix='gallery'),
            uploaded_by=get_current_admin().id
        )
        db.session.add(gallery_image)
        db.session.commit()

        return success_response({'image': gallery_image.to_dict(_base_url())}, 'Image uploaded successfully', 201)

    except APIError:
        raise
    except ValueError:
        return error_response('Invalid display order', 400)
    except Exception:
        db.session.rollback()
        logger.exception('Error uploading gallery image')
        return error_response('Error uploading image', 500)


@gallery_bp.route('/upload-multiple', methods=['POST'])
@jwt_required()
@admin_required
def upload_multiple_images():
    try:
        files = [f for f in request.files.getlist('images') if f and f.filename]
        if not files:
            return error_response('No image files provided', 400)
        if len(files) > MAX_FILES_PER_UPLOAD:
            return error_response(f'A maximum of {MAX_FILES_PER_UPLOAD} images can be uploaded at once', 400)

        category = request.form.get('category') or 'general'
        saved_paths = []
        try:
            for file in files:
                saved_paths.append(save_upload(file, 'gallery', prefix='gallery'))
        except APIError:
            for path in saved_paths:
                delete_upload(path)
            raise

        images = []
        for path in saved_paths:
            image = GalleryImage(image_path=path, category=category, uploaded_by=get_current_admin().id)
            db.session.add(image)
            images.append(image)
        db.session.commit()

        return success_response({'images': [image.to_dict(_base_url()) for image in images]},
                                f'{len(images)} images uploaded successfully', 201)

    except APIError:
        raise
    except Exception:
        db.session.rollback()
        logger.exception('Error uploading gallery images')
        return error_response('Error uploading images', 500)


@gallery_bp.route('/<int:image_id>', methods=['PUT'])
@jwt_required()
@admin_required
def update_image(image_id):
    image = db.session.get(GalleryImage, image_id)
    if not image:
        return error_response('Image not found', 404)

    data = request.get_json(silent=True) or {}
    for field in ('title', 'description', 'category'):
        if field in data:
            setattr(image, field, data[field])
    if 'display_order' in data:
        try:
            image.display_order = int(data['display_order'] or 0)
        except (TypeError, ValueError):
            db.session.rollback()
            return error_response('Invalid display order', 400)
    if 'is_active' in data:
        image.is_active = parse_bool(data['is_active'])

    db.session.commit()
    return success_response(None, 'Image updated successfully')


@gallery_bp.route('/<int:image_id>', methods=['DELETE'])
@jwt_required()
@admin_required
def delete_image(image_id):
    image = db.session.get(GalleryImage, image_id)
    if not image:
        return error_response('Image not found', 404)

    path = image.image_path
    db.session.delete(image)
    db.session.commit()
    delete_upload(path)
    return success_response(None, 'Image deleted successfully')
