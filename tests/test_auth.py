from smart_library import db
from smart_library.models.user import User
from smart_library.models.wallet import WalletTransaction, ReferenceType

SIGNUP = {
    'name': 'New Member',
    'email': 'New@Test.com',
    'mobile': '9000000001',
    'password': 'secret123',
    'dob': '1999-05-20',
    'gender': 'Male'
}


class TestSignup:
    def test_signup_success(self, client):
        response = client.post('/api/auth/signup', json=SIGNUP)

        assert response.status_code == 201
        data = response.get_json()['data']
        assert data['token']
        assert data['user']['email'] == 'new@test.com'
        assert data['user']['wallet_balance'] == 0.0

    def test_signup_reports_every_invalid_field(self, client):
        response = client.post('/api/auth/signup', json={'email': 'bad', 'mobile': '12'})

        assert response.status_code == 400
        fields = {error['field'] for error in response.get_json()['errors']}
        assert {'name', 'email', 'mobile', 'password', 'dob', 'gender'} <= fields

    def test_signup_duplicate_email(self, client, user):
        response = client.post('/api/auth/signup', json={**SIGNUP, 'email': user.email})

        assert response.status_code == 400
        assert 'already exists' in response.get_json()['message']

    def test_signup_with_referral_credits_both_wallets(self, client, other_user):
        response = client.post('/api/auth/signup', json={**SIGNUP, 'referred_by': other_user.referral_code.lower()})

        assert response.status_code == 201
        new_user = User.query.filter_by(email='new@test.com').first()
        assert float(new_user.wallet_balance) == 100.0
        db.session.refresh(other_user)
        assert float(other_user.wallet_balance) == 100.0
        assert WalletTransaction.query.filter_by(reference_type=ReferenceType.REFERRAL).count() == 2


class TestLogin:
    def test_login_with_email(self, client, user):
        response = client.post('/api/auth/login', json={'identifier': 'MEMBER@test.com', 'password': 'secret123'})

        assert response.status_code == 200
        assert response.get_json()['data']['user']['id'] == user.id

    def test_login_with_mobile(self, client, user):
        response = client.post('/api/auth/login', json={'identifier': user.mobile, 'password': 'secret123'})

        assert response.status_code == 200
        assert response.get_json()['data']['token']

    def test_login_wrong_password(self, client, user):
        response = client.post('/api/auth/login', json={'identifier': user.email, 'password': 'nope'})

        assert response.status_code == 401
        assert response.get_json()['success'] is False

    def test_login_blocked_user(self, client, user):
        user.is_blocked = True
        db.session.commit()

        response = client.post('/api/auth/login', json={'identifier': user.email, 'password': 'secret123'})

        assert response.status_code == 403

    def test_admin_login(self, client, admin):
        response = client.post('/api/auth/admin/login', json={'email': admin.email, 'password': 'admin123'})

        assert response.status_code == 200
        assert response.get_json()['data']['admin']['email'] == admin.email


class TestTokens:
    def test_missing_token_is_unauthorized(self, client):
        response = client.get('/api/user/profile')

        assert response.status_code == 401
        assert response.get_json()['message'] == 'Not authorized, no token'

    def test_member_token_rejected_on_admin_routes(self, client, user_headers):
        response = client.get('/api/admin/dashboard', headers=user_headers)

        assert response.status_code == 403

    def test_admin_token_rejected_on_member_routes(self, client, admin_headers):
        response = client.get('/api/wallet', headers=admin_headers)

        assert response.status_code == 403

    def test_blocked_member_token_rejected(self, client, user, user_headers):
        user.is_blocked = True
        db.session.commit()

        response = client.get('/api/user/profile', headers=user_headers)

        assert response.status_code == 403


class TestPasswordReset:
    def test_forgot_then_reset(self, client, user):
        response = client.post('/api/auth/forgot-password', json={'email': user.email})
        assert response.status_code == 200
        token = response.get_json()['data']['resetToken']

        response = client.post('/api/auth/reset-password', json={'token': token, 'newPassword': 'changed1'})
        assert response.status_code == 200

        response = client.post('/api/auth/login', json={'identifier': user.email, 'password': 'changed1'})
        assert response.status_code == 200

    def test_reset_token_single_use(self, client, user):
        token = client.post('/api/auth/forgot-password', json={'email': user.email}).get_json()['data']['resetToken']
        client.post('/api/auth/reset-password', json={'token': token, 'newPassword': 'changed1'})

        response = client.post('/api/auth/reset-password', json={'token': token, 'newPassword': 'changed2'})

        assert response.status_code == 400

    def test_change_password_requires_current(self, client, user_headers):
        response = client.post('/api/auth/change-password', headers=user_headers,
                               json={'currentPassword': 'wrong', 'newPassword': 'changed1'})

        assert response.status_code == 400
        assert response.get_json()['message'] == 'Current password is incorrect'
