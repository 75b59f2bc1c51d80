from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.core.management.base import BaseCommand

from modules.core.permissions import ROLE_ADMIN, ROLE_USER
from modules.products.dtos import CreateProductDTO
from modules.products.exceptions import DuplicateProduct
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.services import ProductService

SEED_PRODUCTS = [
    ("Steak", "Dry-aged ribeye, 400g", Decimal("1000.00")),
    ("Socks", "Nike comfy socks", Decimal("30.00")),
    ("Protein Bar", "24g protein per 100g", Decimal("5.00")),
    ("Home Jersey 2009", "Long sleeve, club classic", Decimal("90.00")),
]


class Command(BaseCommand):
    help = "Seed database with roles, demo users and catalog products."

    def handle(self, *args, **options):
        self.stdout.write("Seeding development data...")

        groups = self._seed_groups()
        users_created = self._seed_users(groups)
        products_created = self._seed_products()

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"groups={len(groups)}, "
                f"users={users_created}, "
                f"products={products_created}"
            )
        )

    def _seed_groups(self) -> dict[str, Group]:
        return {
            role: Group.objects.get_or_create(name=role)[0]
            for role in (ROLE_ADMIN, ROLE_USER)
        }

    def _seed_users(self, groups: dict[str, Group]) -> int:
        User = get_user_model()
        created = 0
        for username, password, role in (
            ("admin", "admin123", ROLE_ADMIN),
            ("user", "user123", ROLE_USER),
        ):
            user, was_created = User.objects.get_or_create(username=username)
            if was_created:
                user.set_password(password)
                user.save()
                created += 1
            user.groups.add(groups[role])
        return created

    def _seed_products(self) -> int:
        self.stdout.write("Creating products...")
        service = ProductService(repository=ProductDjangoRepository())
        created = 0
        for name, description, price in SEED_PRODUCTS:
            try:
                service.create_product(
                    CreateProductDTO(name=name, description=description, price=price)
                )
            except DuplicateProduct:
                continue
            created += 1
        return created
