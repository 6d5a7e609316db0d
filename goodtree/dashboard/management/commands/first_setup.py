from django.core.management.base import BaseCommand
from django.core.management import call_command
from django.contrib.auth.models import User, Group
from decouple import config

from base.views import ROLES

PROJECT_APPS = [
    "administration",
    "students",
    "teachers",
    "groups",
    "tasks",
    "incidents",
    "events",
    "leave",
]


class Command(BaseCommand):
    help = "Initial setup: migrate, create role groups, create superuser"

    def add_arguments(self, parser):
        parser.add_argument(
            "--seed",
            action="store_true",
            help="Also load default statuses, incident types, roles and school structure",
        )

    def handle(self, *args, **options):
        self.stdout.write("Creating migrations...")
        call_command("makemigrations", *PROJECT_APPS)

        self.stdout.write("Applying migrations...")
        call_command("migrate")

        for group_name in ROLES:
            group, created = Group.objects.get_or_create(name=group_name)
            if created:
                self.stdout.write(f"Created group: {group_name}")
            else:
                self.stdout.write(f"Group {group_name} already exists")

        username = config("DJANGO_SUPERUSER_USERNAME")
        email = config("DJANGO_SUPERUSER_EMAIL")
        password = config("DJANGO_SUPERUSER_PASSWORD")

        if not User.objects.filter(username=username).exists():
            user = User.objects.create_superuser(
                username=username, email=email, password=password
            )
            user.groups.add(Group.objects.get(name="Admin"))
            self.stdout.write(
                f"Created superuser: {username} and assigned to Admin group"
            )
        else:
            self.stdout.write(f"Superuser {username} already exists")

        if options["seed"]:
            call_command("seed_initial_data")

        self.stdout.write(self.style.SUCCESS("Setup complete."))
