"""
Shared helpers: audit logging, storage uploads and JSON serialisation
"""
import logging
import os
import uuid
from decimal import Decimal

from django.core.files.storage import default_storage
from django.db.models.fields.files import FieldFile
from django.forms.models import model_to_dict
from django.http import HttpResponse

logger = logging.getLogger(__name__)


def get_client_ip(request):
    """Best guess at the caller's address, honouring X-Forwarded-For"""
    if request is None:
        return None
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


def log_user_action(action, details='', request=None, user=None):
    """
    Write a row to the user log.

    Audit writes never interrupt the operation being audited: any failure
    is logged and swallowed.
    """
    try:
        from .models import UserLog

        if user is None and request is not None and getattr(request, 'user', None):
            if request.user.is_authenticated:
                user = request.user

        email = ''
        if user is not None:
            email = user.email or user.get_username()

        return UserLog.objects.create(
            user_email=email,
            action=action,
            details=details or '',
            ip_address=get_client_ip(request),
        )
    except Exception as e:
        logger.error(f"Failed to write user log '{action}': {e}", exc_info=True)
        return None


def upload_file(file, folder):
    """
    Save an uploaded file under folder/ with a unique name.

    Returns the public URL of the stored object.
    """
    _stem, ext = os.path.splitext(file.name)
    name = f"{folder.strip('/')}/{uuid.uuid4().hex}{ext.lower()}"
    stored_name = default_storage.save(name, file)
    logger.info(f"Stored upload {file.name} as {stored_name}")
    return default_storage.url(stored_name)


def serialize_instance(instance, fields=None, exclude=None):
    """Flatten a model instance into JSON-friendly primitives"""
    data = model_to_dict(instance, fields=fields, exclude=exclude)
    data['id'] = instance.pk
    # model_to_dict skips non-editable columns (generated numbers, timestamps)
    for field in instance._meta.concrete_fields:
        if field.editable or field.name in data:
            continue
        if fields is not None and field.name not in fields:
            continue
        if exclude and field.name in exclude:
            continue
        data[field.name] = getattr(instance, field.attname)
    for key, value in list(data.items()):
        if isinstance(value, Decimal):
            data[key] = float(value)
        elif isinstance(value, FieldFile):
            data[key] = value.url if value else None
        elif hasattr(value, 'isoformat'):
            data[key] = value.isoformat()
    return data


def form_errors(form):
    """Field-level error payload for a failed form"""
    return {field: [str(e) for e in errors] for field, errors in form.errors.items()}


def attachment_response(artifact):
    """Wrap an ExportArtifact as a file download"""
    response = HttpResponse(artifact.content, content_type=artifact.content_type)
    response['Content-Disposition'] = f'attachment; filename="{artifact.filename}"'
    return response
