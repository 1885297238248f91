from flask import Blueprint, current_app, jsonify, request, send_file, url_for
from flask_login import login_required, current_user
from werkzeug.utils import secure_filename
import hashlib
import logging
import os
import re

from bargen.errors import NotFound, ValidationError
from bargen.extensions import db
from bargen.models import Blob

logger = logging.getLogger(__name__)

bp = Blueprint('blobs', __name__)

ALLOWED_EXTENSIONS = ('jpg', 'jpeg', 'png', 'webp', 'gif')
REF_PATTERN = re.compile(r'^[0-9a-f]{64}$')


def _blob_path(ref):
    return os.path.join(current_app.config['BLOB_FOLDER'], ref)


def _blob_dict(blob):
    return {
        'ref': blob.ref,
        'content_type': blob.content_type,
        'size': blob.size,
        'url': url_for('blobs.fetch_blob', ref=blob.ref, _external=True),
    }


@bp.route('/api/blobs', methods=['POST'])
@login_required
def upload_blob():
    f = request.files.get('file')
    if not f:
        raise ValidationError('file is required')

    filename = secure_filename(f.filename or '')
    ext = (filename.rsplit('.', 1)[-1] if '.' in filename else '').lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise ValidationError(
            'Unsupported image type (jpg/jpeg/png/webp/gif only)')

    content = f.read()
    if not content:
        raise ValidationError('file cannot be empty')
    ref = hashlib.sha256(content).hexdigest()

    blob = db.session.get(Blob, ref)
    if blob is None:
        os.makedirs(current_app.config['BLOB_FOLDER'], exist_ok=True)
        with open(_blob_path(ref), 'wb') as out:
            out.write(content)
        blob = Blob(
            ref=ref,
            content_type=f.mimetype or 'application/octet-stream',
            size=len(content),
            uploaded_by=current_user.id,
        )
        db.session.add(blob)
        db.session.commit()
        logger.info(
            "Stored blob %s (%d bytes) for %s",
            ref, len(content), current_user.principal)

    return jsonify(_blob_dict(blob)), 201


@bp.route('/api/blobs/<ref>', methods=['GET'])
def fetch_blob(ref):
    if not REF_PATTERN.match(ref):
        raise NotFound(f'Blob {ref} not found')
    blob = db.session.get(Blob, ref)
    if blob is None or not os.path.isfile(_blob_path(ref)):
        raise NotFound(f'Blob {ref} not found')
    return send_file(_blob_path(ref), mimetype=blob.content_type)
