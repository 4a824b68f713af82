import logging

from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import transaction
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods

from groundbook.http import BadJsonBody, json_error, read_json

from .authorization import AuthorizationPolicy
from .decorators import admin_required, identity_required
from .models import AdminUser, UserProfile

logger = logging.getLogger(__name__)


def _profile_payload(profile):
    return {
        'name': profile.name,
        'phone': profile.phone,
        'updatedAt': profile.updated_at.isoformat(),
    }


@require_GET
@identity_required
def me(request):
    identity = request.identity
    return JsonResponse({
        'uid': identity.uid,
        'email': identity.email,
        'name': identity.name,
        'phoneNumber': identity.phone_number,
        'isAdmin': AuthorizationPolicy().is_admin(identity),
    })


@csrf_exempt
@require_http_methods(['GET', 'PUT'])
@identity_required
def profile(request):
    uid = request.identity.uid

    if request.method == 'GET':
        existing = UserProfile.objects.filter(user_uid=uid).first()
        if existing is None:
            return json_error('Profile not found.', status=404)
        return JsonResponse({**_profile_payload(existing), 'email': request.identity.email})

    try:
        payload = read_json(request)
    except BadJsonBody as exc:
        return json_error(str(exc))

    name = payload.get('name')
    phone = payload.get('phone')
    name = name.strip() if isinstance(name, str) else ''
    phone = phone.strip() if isinstance(phone, str) else ''
    if not name or not phone:
        return json_error('Name and phone are required.')

    saved, _ = UserProfile.objects.update_or_create(
        user_uid=uid,
        defaults={'name': name, 'phone': phone},
    )
    return JsonResponse(_profile_payload(saved))


def _admin_payload(admin):
    return {
        'id': admin.id,
        'email': admin.email,
        'name': admin.name or None,
        'createdAt': admin.created_at.isoformat(),
        'createdBy': admin.created_by or None,
    }


@csrf_exempt
@require_http_methods(['GET', 'POST'])
@admin_required
def admin_users(request):
    if request.method == 'GET':
        return JsonResponse({'admins': [_admin_payload(a) for a in AdminUser.objects.all()]})

    try:
        payload = read_json(request)
    except BadJsonBody as exc:
        return json_error(str(exc))

    email = payload.get('email')
    email = email.strip().lower() if isinstance(email, str) else ''
    if not email:
        return json_error('Email is required.')
    try:
        validate_email(email)
    except ValidationError:
        return json_error('Invalid email format.')

    if AdminUser.objects.filter(email=email).exists():
        return json_error('This email is already an admin.')

    name = payload.get('name')
    admin = AdminUser.objects.create(
        email=email,
        name=name.strip() if isinstance(name, str) else '',
        created_by=request.identity.normalized_email or '',
    )
    logger.info('Admin %s added by %s', admin.email, request.identity.uid)
    return JsonResponse(_admin_payload(admin), status=201)


@csrf_exempt
@require_http_methods(['DELETE'])
@admin_required
def admin_user_detail(request, admin_id):
    with transaction.atomic():
        admin = AdminUser.objects.select_for_update().filter(pk=admin_id).first()
        if admin is None:
            return json_error('Admin user not found.', status=404)
        if admin.email == request.identity.normalized_email:
            return json_error('You cannot remove your own admin access.')
        if AdminUser.objects.count() <= 1:
            return json_error('Cannot delete the last admin user.')
        admin.delete()

    logger.info('Admin %s removed by %s', admin.email, request.identity.uid)
    return JsonResponse({'message': 'Admin user removed successfully.'})
