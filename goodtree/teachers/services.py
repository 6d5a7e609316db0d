import logging

from django.contrib.auth.models import Group
from django.db import transaction
from django.utils.text import slugify

from .models import Teacher, TeacherRole

logger = logging.getLogger(__name__)


def unique_role_code(name):
    base = slugify(name).replace("-", "_") or "role"
    code = base
    counter = 2
    while TeacherRole.objects.filter(code=code).exists():
        code = f"{base}_{counter}"
        counter += 1
    return code


@transaction.atomic
def convert_user_to_teacher(user, **profile):
    """Attach a Teacher profile and the Teacher group to an existing user.

    Safe to call repeatedly; profile fields passed in overwrite the stored ones.
    """
    teacher_group, _ = Group.objects.get_or_create(name="Teacher")
    user.groups.add(teacher_group)

    teacher, created = Teacher.objects.get_or_create(user=user, defaults=profile)
    if not created and profile:
        for field, value in profile.items():
            setattr(teacher, field, value)
        teacher.save()

    if created:
        logger.info("Converted user %s to teacher", user.username)
    return teacher
