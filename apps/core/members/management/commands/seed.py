import random
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone
from faker import Faker

from apps.core.ledger.models import Payment
from apps.core.ledger.services import apply_annual_fees, record_payment
from apps.core.members.services import create_member
from apps.core.users.models import User


class Command(BaseCommand):
    help = 'Seeds the database with members, annual fees and payments.'

    def add_arguments(self, parser):
        parser.add_argument('--members', type=int, default=40)
        parser.add_argument('--seed', type=int, default=None)

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write('Seeding database...')

        fake = Faker('en_AU')
        if options['seed'] is not None:
            Faker.seed(options['seed'])
            random.seed(options['seed'])

        if not User.objects.filter(username='superadmin').exists():
            User.objects.create_superuser('superadmin', 'superadmin@example.com', 'password')
            self.stdout.write(self.style.SUCCESS('Successfully created superadmin user.'))

        treasurer, created = User.objects.get_or_create(
            username='treasurer',
            defaults={'role': User.ROLE_EDIT},
        )
        if created:
            treasurer.set_password('password')
            treasurer.save()
            self.stdout.write(self.style.SUCCESS('Successfully created treasurer user.'))

        members = []
        for _ in range(options['members']):
            member = create_member(
                {
                    'full_name': fake.name(),
                    'email': fake.email(),
                    'phone': fake.phone_number()[:20],
                    'address': fake.address(),
                    'date_of_birth': fake.date_of_birth(minimum_age=8, maximum_age=85),
                    'golf_australia_id': str(fake.unique.random_number(digits=10, fix_len=True)),
                },
                created_by=treasurer,
            )
            members.append(member)
        self.stdout.write(self.style.SUCCESS(f'Successfully created {len(members)} members.'))

        year = timezone.localdate().year
        results = apply_annual_fees(year, applied_by=treasurer)
        self.stdout.write(self.style.SUCCESS(
            f"Applied {year} annual fees: {results['successful']} charged, total {results['total_amount']}."
        ))

        methods = [method for method, _ in Payment.METHOD_CHOICES]
        paid = 0
        for member in random.sample(members, k=len(members) // 2):
            member.refresh_from_db()
            owed = -member.account_balance
            if owed <= 0:
                continue
            record_payment(
                {
                    'member_id': member.pk,
                    'amount': random.choice([owed, (owed / 2).quantize(Decimal('0.01'))]),
                    'payment_date': fake.date_between(start_date='-60d', end_date='today'),
                    'payment_method': random.choice(methods),
                    'reference': fake.bothify('REF-####'),
                },
                recorded_by=treasurer,
            )
            paid += 1
        self.stdout.write(self.style.SUCCESS(f'Successfully recorded {paid} payments.'))

        self.stdout.write(self.style.SUCCESS('Database seeded successfully!'))
