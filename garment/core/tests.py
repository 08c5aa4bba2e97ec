"""
Test suite for accounts, roles and the API error envelope
Tests: role capabilities, registration, login, OTP flows, profile and audit logs
"""
from datetime import timedelta
from io import StringIO

from django.core import mail
from django.core.management import call_command, CommandError
from django.test import SimpleTestCase, TestCase, override_settings
from django.utils import timezone
from rest_framework import status

from garment.catalog.models import Product
from garment.core.models import AuditLog, User
from garment.core.roles import Role, Capability, has_capability, role_from_value, is_admin_email
from garment.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from garment.core.utils import create_audit_log


class RoleCapabilityTests(SimpleTestCase):
    """Test the role to capability table"""

    def test_admin_has_every_capability(self):
        for capability in Capability:
            self.assertTrue(has_capability(Role.ADMIN, capability))

    def test_plain_user_has_no_capability(self):
        for capability in Capability:
            self.assertFalse(has_capability('user', capability))

    def test_unknown_and_missing_roles_have_no_capability(self):
        self.assertFalse(has_capability('superhero', Capability.MANAGE_ORDERS))
        self.assertFalse(has_capability(None, Capability.MANAGE_ORDERS))
        self.assertFalse(has_capability('', Capability.VIEW_FINANCE))

    def test_unknown_capability_is_denied(self):
        self.assertFalse(has_capability(Role.ADMIN, 'launch_rockets'))
        self.assertFalse(has_capability('sales', None))

    def test_staff_roles(self):
        self.assertTrue(has_capability('sales', Capability.MANAGE_ORDERS))
        self.assertFalse(has_capability('sales', Capability.VIEW_FINANCE))
        self.assertTrue(has_capability('finance', 'view_finance'))
        self.assertFalse(has_capability('finance', Capability.ACCESS_ADMIN_DASHBOARD))
        self.assertTrue(has_capability('manager', Capability.ACCESS_ADMIN_DASHBOARD))
        self.assertFalse(has_capability('manager', Capability.VIEW_FINANCE))
        self.assertTrue(has_capability('inventory', Capability.MANAGE_PRODUCTS))

    def test_role_from_value_is_tolerant(self):
        self.assertEqual(role_from_value(' Admin '), Role.ADMIN)
        self.assertEqual(role_from_value(Role.SALES), Role.SALES)
        self.assertIsNone(role_from_value('owner'))
        self.assertIsNone(role_from_value(None))

    def test_admin_email_pattern(self):
        pattern = r'^Admin\d{3}@next\.com$'
        self.assertTrue(is_admin_email('Admin001@next.com', pattern))
        self.assertFalse(is_admin_email('Admin1@next.com', pattern))
        self.assertFalse(is_admin_email('someone@next.com', pattern))
        self.assertFalse(is_admin_email(None, pattern))


class HealthAndErrorEnvelopeTests(TestCase):
    """Test health ping and the error envelope"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def test_root_health(self):
        response = self.client.get('/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertIn('timestamp', response.data)

    def test_auth_ping(self):
        response = self.client.get('/api/auth/ping/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_unauthenticated_request_uses_envelope(self):
        response = self.client.get('/api/auth/is-auth/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data['success'])
        self.assertTrue(response.data['message'])

    def test_validation_error_uses_envelope(self):
        response = self.client.post('/api/auth/register/', {'email': 'new@test.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['success'])
        self.assertIn('errors', response.data)


class RegistrationAndLoginTests(TestCase):
    """Test registration and login endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def test_register_user(self):
        data = {'name': 'Nimal', 'email': 'nimal@test.com', 'password': 'secret123'}
        response = self.client.post('/api/auth/register/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['role'], 'user')
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(len(mail.outbox), 1)

    def test_register_duplicate_email(self):
        TestDataFactory.create_user(email='dup@test.com')
        data = {'name': 'Dup', 'email': 'dup@test.com', 'password': 'secret123'}
        response = self.client.post('/api/auth/register/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'User already exists')

    def test_register_admin_pattern_gets_admin_role(self):
        data = {'name': 'Boss', 'email': 'Admin007@next.com', 'password': 'secret123'}
        response = self.client.post('/api/auth/register/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['role'], 'admin')
        self.assertIn('view_finance', response.data['user']['capabilities'])

    def test_login(self):
        TestDataFactory.create_user(email='login@test.com', password='secret123', role='sales')
        response = self.client.post('/api/auth/login/', {'email': 'login@test.com', 'password': 'secret123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['role'], 'sales')
        self.assertEqual(response.data['user']['email'], 'login@test.com')

    def test_login_bad_password(self):
        TestDataFactory.create_user(email='login@test.com', password='secret123')
        response = self.client.post('/api/auth/login/', {'email': 'login@test.com', 'password': 'wrong'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['message'], 'Invalid email or password')

    def test_is_auth_and_profile_fallback(self):
        user = TestDataFactory.create_user(email='me@test.com')
        self.client.authenticate_user(user)
        for url in ('/api/auth/is-auth/', '/api/auth/profile/'):
            response = self.client.get(url)
            self.assertEqual(response.status_code, status.HTTP_200_OK)
            self.assertEqual(response.data['user']['email'], 'me@test.com')

    def test_logout_always_succeeds(self):
        response = self.client.post('/api/auth/logout/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Logged Out')


class OtpFlowTests(TestCase):
    """Test account verification and password reset codes"""

    def setUp(self):
        self.user = TestDataFactory.create_user(email='otp@test.com', password='secret123')
        self.client = AuthenticatedAPIClient()

    def test_verify_account(self):
        self.client.authenticate_user(self.user)
        response = self.client.post('/api/auth/send-verify-otp/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(len(self.user.verify_otp), 6)
        self.assertIn(self.user.verify_otp, mail.outbox[-1].body)

        response = self.client.post('/api/auth/verify-account/', {'otp': self.user.verify_otp}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.is_account_verified)

        response = self.client.post('/api/auth/send-verify-otp/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Account already verified')

    def test_verify_account_wrong_otp(self):
        self.client.authenticate_user(self.user)
        self.client.post('/api/auth/send-verify-otp/')
        response = self.client.post('/api/auth/verify-account/', {'otp': '000000'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Invalid OTP')

    def test_verify_account_expired_otp(self):
        self.user.verify_otp = '123456'
        self.user.verify_otp_expires_at = timezone.now() - timedelta(minutes=1)
        self.user.save()
        self.client.authenticate_user(self.user)
        response = self.client.post('/api/auth/verify-account/', {'otp': '123456'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'OTP expired')

    def test_reset_password(self):
        response = self.client.post('/api/auth/send-reset-otp/', {'email': 'otp@test.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()

        data = {'email': 'otp@test.com', 'otp': self.user.reset_otp, 'new_password': 'brandnew99'}
        response = self.client.post('/api/auth/reset-password/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('brandnew99'))
        self.assertEqual(self.user.reset_otp, '')

    def test_reset_otp_unknown_user(self):
        response = self.client.post('/api/auth/send-reset-otp/', {'email': 'ghost@test.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], 'User not found')


class ProfileTests(TestCase):
    """Test the caller's own profile endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user(email='profile@test.com', password='secret123', name='Kamal')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_user_data(self):
        response = self.client.get('/api/user/data/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['user_data'], {'name': 'Kamal', 'is_account_verified': False})

    def test_update_profile(self):
        response = self.client.put('/api/user/profile/', {'name': 'Kamal P', 'phone': '0711111111'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['user']['name'], 'Kamal P')
        self.assertEqual(response.data['user']['phone'], '0711111111')

    def test_update_profile_email_taken(self):
        TestDataFactory.create_user(email='taken@test.com')
        response = self.client.put('/api/user/profile/', {'email': 'taken@test.com'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Email is already in use')

    def test_update_password(self):
        data = {'current_password': 'secret123', 'new_password': 'another123'}
        response = self.client.put('/api/user/update-password/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('another123'))

    def test_update_password_wrong_current(self):
        data = {'current_password': 'nope', 'new_password': 'another123'}
        response = self.client.put('/api/user/update-password/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Current password is incorrect')

    def test_delete_account(self):
        response = self.client.delete('/api/user/profile/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(type(self.user).objects.filter(pk=self.user.pk).exists())


class AuditLogTests(TestCase):
    """Test audit log helper and listing"""

    def setUp(self):
        self.admin = TestDataFactory.create_user(role='admin')
        self.client = AuthenticatedAPIClient()

    def test_create_audit_log_without_request(self):
        log = create_audit_log(action='create', model_name='Product', object_id=5, user=self.admin, object_name='Shirt')
        self.assertEqual(log.object_id, '5')
        self.assertEqual(log.user, self.admin)

    def test_create_audit_log_missing_fields_is_skipped(self):
        self.assertIsNone(create_audit_log(action='create', model_name=None, object_id=1))
        self.assertEqual(AuditLog.objects.count(), 0)

    def test_list_requires_dashboard_access(self):
        self.client.authenticate_user(TestDataFactory.create_user(role='finance'))
        response = self.client.get('/api/audit-logs/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(response.data['success'])

    def test_list_filters_by_action(self):
        create_audit_log(action='create', model_name='Product', object_id=1, user=self.admin)
        create_audit_log(action='delete', model_name='Product', object_id=1, user=self.admin)
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/audit-logs/', {'action': 'delete'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['logs'][0]['action'], 'delete')


@override_settings(ADMIN_EMAIL_PATTERN=r'^boss@factory\.test$')
class AdminPromotionOnLoginTests(TestCase):
    """Accounts matching the admin pattern are promoted at login"""

    def test_login_promotes_matching_email(self):
        user = TestDataFactory.create_user(email='boss@factory.test', password='secret123')
        client = AuthenticatedAPIClient()
        response = client.post('/api/auth/login/', {'email': 'boss@factory.test', 'password': 'secret123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['role'], 'admin')
        user.refresh_from_db()
        self.assertEqual(user.role, 'admin')


class ManagementCommandTests(TestCase):
    """Test the admin and stock maintenance commands"""

    def test_create_admin(self):
        out = StringIO()
        call_command('create_admin', 'Owner@Factory.test', '--password', 'secret123', stdout=out)
        user = User.objects.get(email='Owner@factory.test')
        self.assertEqual(user.role, Role.ADMIN.value)
        self.assertTrue(user.check_password('secret123'))
        self.assertIn('Created admin account', out.getvalue())

    def test_create_admin_requires_password_for_new_account(self):
        with self.assertRaises(CommandError):
            call_command('create_admin', 'nobody@factory.test', stdout=StringIO())

    def test_create_admin_promotes_existing_user(self):
        user = TestDataFactory.create_user(email='clerk@factory.test', role='sales')
        out = StringIO()
        call_command('create_admin', 'clerk@factory.test', '--superuser', stdout=out)
        user.refresh_from_db()
        self.assertEqual(user.role, 'admin')
        self.assertTrue(user.is_superuser)
        self.assertIn('Promoted clerk@factory.test from sales to admin', out.getvalue())

    def test_create_admin_matches_email_case_insensitively(self):
        user = TestDataFactory.create_user(email='Jane.Doe@factory.test')
        out = StringIO()
        call_command('create_admin', 'jane.doe@FACTORY.test', '--password', 'secret123', stdout=out)
        self.assertEqual(User.objects.filter(email__iexact='jane.doe@factory.test').count(), 1)
        user.refresh_from_db()
        self.assertEqual(user.role, 'admin')
        self.assertIn('Promoted Jane.Doe@factory.test from user to admin', out.getvalue())

    def test_check_stock_flags_corrects_drift(self):
        product = TestDataFactory.create_product(quantity=3)
        Product.objects.filter(pk=product.pk).update(is_low_stock=False, is_out_of_stock=True)

        out = StringIO()
        call_command('check_stock_flags', '--dry-run', stdout=out)
        product.refresh_from_db()
        self.assertTrue(product.is_out_of_stock)
        self.assertIn('1 products have drifted flags', out.getvalue())

        call_command('check_stock_flags', stdout=StringIO())
        product.refresh_from_db()
        self.assertTrue(product.is_low_stock)
        self.assertFalse(product.is_out_of_stock)
