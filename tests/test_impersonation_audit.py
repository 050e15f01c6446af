import csv
import io

from smart_library import db
from smart_library.models.audit import AdminActionLog, ImpersonationSession
from smart_library.services.audit import log_admin_action


def _start(client, headers, user):
    return client.post(f'/api/admin/impersonation/impersonate/{user.id}', headers=headers).get_json()['data']


class TestImpersonation:
    def test_impersonation_token_acts_as_member(self, client, admin, admin_headers, user):
        data = _start(client, admin_headers, user)

        assert data['expires_in'] == '2 hours'
        assert data['admin_info']['admin_id'] == admin.id
        headers = {'Authorization': f"Bearer {data['impersonation_token']}"}
        response = client.get('/api/user/profile', headers=headers)
        assert response.status_code == 200
        assert response.get_json()['data']['user']['id'] == user.id
        assert AdminActionLog.query.filter_by(action_type='login_as_user').count() == 1

    def test_blocked_member_cannot_be_impersonated(self, client, admin_headers, user):
        user.is_blocked = True
        db.session.commit()

        response = client.post(f'/api/admin/impersonation/impersonate/{user.id}', headers=admin_headers)

        assert response.status_code == 400

    def test_verify_impersonation(self, client, admin, admin_headers, user):
        data = _start(client, admin_headers, user)
        headers = {'Authorization': f"Bearer {data['impersonation_token']}"}

        response = client.get('/api/admin/impersonation/verify-impersonation', headers=headers)

        assert response.status_code == 200
        verified = response.get_json()['data']
        assert verified['is_impersonating'] is True
        assert verified['admin_id'] == admin.id
        assert verified['session_id'] == data['session_id']

    def test_verify_rejects_member_token(self, client, user_headers):
        response = client.get('/api/admin/impersonation/verify-impersonation', headers=user_headers)

        assert response.status_code == 403

    def test_exit_ends_session(self, client, admin_headers, user):
        data = _start(client, admin_headers, user)

        response = client.post(f"/api/admin/impersonation/exit-impersonation/{data['session_id']}",
                               headers=admin_headers)

        assert response.status_code == 200
        session = db.session.get(ImpersonationSession, data['session_id'])
        assert session.is_active is False
        assert session.ended_at is not None
        headers = {'Authorization': f"Bearer {data['impersonation_token']}"}
        response = client.get('/api/admin/impersonation/verify-impersonation', headers=headers)
        assert response.status_code == 403

    def test_active_sessions_and_history(self, client, admin_headers, user):
        _start(client, admin_headers, user)

        active = client.get('/api/admin/impersonation/active-sessions', headers=admin_headers)
        history = client.get(f'/api/admin/impersonation/session-history?user_id={user.id}', headers=admin_headers)

        assert len(active.get_json()['data']['sessions']) == 1
        assert len(history.get_json()['data']['sessions']) == 1

    def test_log_action(self, client, admin_headers, user):
        data = _start(client, admin_headers, user)

        response = client.post('/api/admin/impersonation/log-action', headers=admin_headers, json={
            'session_id': data['session_id'],
            'action_type': 'viewed_bookings'
        })

        assert response.status_code == 200
        log = AdminActionLog.query.filter_by(action_type='impersonation_action').one()
        assert log.action_details['action'] == 'viewed_bookings'


class TestAuditLogs:
    def test_list_with_pagination(self, client, admin, admin_headers, user):
        for _ in range(3):
            log_admin_action(admin.id, 'wallet_credit', target_user_id=user.id, details={'amount': 10})
        log_admin_action(admin.id, 'seat_change', target_user_id=user.id)
        db.session.commit()

        response = client.get('/api/admin/audit-logs?action_type=wallet_credit&limit=2', headers=admin_headers)

        data = response.get_json()['data']
        assert len(data['logs']) == 2
        assert data['pagination']['total'] == 3
        assert data['pagination']['has_more'] is True

    def test_stats(self, client, admin, admin_headers, user):
        log_admin_action(admin.id, 'wallet_credit', target_user_id=user.id)
        log_admin_action(admin.id, 'wallet_credit', target_user_id=user.id)
        db.session.commit()

        response = client.get('/api/admin/audit-logs/stats', headers=admin_headers)

        data = response.get_json()['data']
        assert data['action_distribution'] == [{'action_type': 'wallet_credit', 'count': 2}]
        assert data['admin_activity'][0]['action_count'] == 2

    def test_invalid_date_filter(self, client, admin_headers):
        response = client.get('/api/admin/audit-logs?start_date=yesterday', headers=admin_headers)

        assert response.status_code == 400

    def test_export_csv(self, client, admin, admin_headers, user):
        log_admin_action(admin.id, 'booking_cancel', target_user_id=user.id)
        db.session.commit()

        response = client.get('/api/admin/audit-logs/export/csv', headers=admin_headers)

        assert response.status_code == 200
        assert response.mimetype == 'text/csv'
        assert 'attachment' in response.headers['Content-Disposition']
        rows = list(csv.reader(io.StringIO(response.get_data(as_text=True))))
        assert rows[0][:3] == ['ID', 'Action Type', 'Admin Name']
        assert rows[1][1] == 'booking_cancel'
        assert rows[1][3] == user.name
