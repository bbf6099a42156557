# customers/tests/test_customers.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db import IntegrityError
from django.test import TestCase
from rest_framework.test import APIClient

from customers.models import Customer
from products.models import Product
from sales.services.sale_service import create_sale

User = get_user_model()


class CustomerModelTests(TestCase):
    """
    GUARANTEES:
    - email is stored lower-cased
    - email is unique only when present
    """

    def test_email_normalized(self):
        customer = Customer.objects.create(name="Jane", email=" Jane@Example.COM ")
        self.assertEqual(customer.email, "jane@example.com")

    def test_blank_emails_do_not_collide(self):
        Customer.objects.create(name="A")
        Customer.objects.create(name="B")
        self.assertEqual(Customer.objects.count(), 2)

    def test_duplicate_email_rejected(self):
        Customer.objects.create(name="A", email="a@example.com")
        with self.assertRaises(IntegrityError):
            Customer.objects.create(name="B", email="A@example.com")


class CustomerApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.staff = User.objects.create_user(email="staff@example.com", password="pass", role="staff")
        self.client.force_authenticate(self.staff)

    def test_create_and_search(self):
        created = self.client.post(
            "/api/customers/",
            {"name": "Jane Doe", "email": "jane@example.com", "city": "Springfield"},
            format="json",
        )
        self.assertEqual(created.status_code, 201, created.data)
        self.assertEqual(created.data["sale_count"], 0)

        Customer.objects.create(name="John Smith", phone="555-0100")

        response = self.client.get("/api/customers/", {"query": "jane"})
        self.assertEqual([c["name"] for c in response.data["results"]], ["Jane Doe"])

        response = self.client.get("/api/customers/", {"query": "0100"})
        self.assertEqual([c["name"] for c in response.data["results"]], ["John Smith"])

    def test_duplicate_email_case_insensitive(self):
        Customer.objects.create(name="Jane", email="jane@example.com")
        response = self.client.post(
            "/api/customers/", {"name": "Other", "email": "JANE@example.com"}, format="json"
        )
        self.assertEqual(response.status_code, 400)

    def test_detail_includes_sales_history(self):
        customer = Customer.objects.create(name="Jane")
        product = Product.objects.create(name="Rice", sku="RC-001", price=Decimal("5.00"), quantity=5)
        create_sale(user=self.staff, items=[{"product_id": product.pk, "quantity": 1}], customer_id=customer.pk)

        response = self.client.get(f"/api/customers/{customer.pk}/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["sale_count"], 1)
        self.assertEqual(response.data["sales"][0]["invoice_number"], "INV-00001")

    def test_delete_blocked_when_sales_exist(self):
        customer = Customer.objects.create(name="Jane")
        product = Product.objects.create(name="Rice", sku="RC-001", price=Decimal("5.00"), quantity=5)
        create_sale(user=self.staff, items=[{"product_id": product.pk, "quantity": 1}], customer_id=customer.pk)

        response = self.client.delete(f"/api/customers/{customer.pk}/")

        self.assertEqual(response.status_code, 400)
        self.assertTrue(Customer.objects.filter(pk=customer.pk).exists())

    def test_delete_without_sales(self):
        customer = Customer.objects.create(name="Jane")
        response = self.client.delete(f"/api/customers/{customer.pk}/")
        self.assertEqual(response.status_code, 204)

    def test_anonymous_denied(self):
        self.client.force_authenticate(None)
        response = self.client.get("/api/customers/")
        self.assertIn(response.status_code, (401, 403))
