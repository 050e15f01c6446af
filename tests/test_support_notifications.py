from smart_library import db
from smart_library.models.notification import AdminNotification, Notification
from smart_library.models.support import SupportTicket, TicketStatus


def _open_ticket(client, headers, **extra):
    payload = {'subject': 'Wi-Fi down', 'message': 'No internet on floor 1', **extra}
    return client.post('/api/support/tickets', headers=headers, json=payload)


class TestSupportTickets:
    def test_open_ticket_with_first_message(self, client, user_headers):
        response = _open_ticket(client, user_headers)

        assert response.status_code == 201
        data = response.get_json()['data']
        assert data['ticket_number'].startswith('TKT-')
        messages = client.get(f"/api/support/tickets/{data['id']}/messages", headers=user_headers)
        assert [m['message'] for m in messages.get_json()['data']['messages']] == ['No internet on floor 1']
        assert AdminNotification.query.count() == 1

    def test_invalid_priority(self, client, user_headers):
        response = _open_ticket(client, user_headers, priority='urgent')

        assert response.status_code == 400

    def test_admin_reply_moves_ticket_in_progress(self, client, user, user_headers, admin_headers):
        ticket_id = _open_ticket(client, user_headers).get_json()['data']['id']

        response = client.post(f'/api/support/admin/tickets/{ticket_id}/reply', headers=admin_headers,
                               json={'message': 'Router restarted'})

        assert response.status_code == 201
        assert db.session.get(SupportTicket, ticket_id).status == TicketStatus.IN_PROGRESS
        assert Notification.query.filter_by(user_id=user.id).count() == 1

    def test_resolving_sets_resolved_at(self, client, user_headers, admin_headers):
        ticket_id = _open_ticket(client, user_headers).get_json()['data']['id']

        response = client.put(f'/api/support/admin/tickets/{ticket_id}/status', headers=admin_headers,
                              json={'status': 'resolved'})

        assert response.status_code == 200
        assert db.session.get(SupportTicket, ticket_id).resolved_at is not None

    def test_closed_ticket_rejects_messages(self, client, user_headers, admin_headers):
        ticket_id = _open_ticket(client, user_headers).get_json()['data']['id']
        client.put(f'/api/support/admin/tickets/{ticket_id}/status', headers=admin_headers,
                   json={'status': 'closed'})

        response = client.post(f'/api/support/tickets/{ticket_id}/messages', headers=user_headers,
                               json={'message': 'Still broken'})

        assert response.status_code == 400

    def test_members_only_see_own_tickets(self, client, user_headers, other_user):
        from smart_library.utils.tokens import generate_token
        ticket_id = _open_ticket(client, user_headers).get_json()['data']['id']
        headers = {'Authorization': f'Bearer {generate_token(other_user.id)}'}

        response = client.get(f'/api/support/tickets/{ticket_id}/messages', headers=headers)

        assert response.status_code == 404


class TestNotifications:
    def test_send_to_one_member(self, client, admin_headers, user, user_headers):
        response = client.post('/api/notifications', headers=admin_headers, json={
            'title': 'Hello', 'message': 'Welcome aboard', 'user_id': user.id, 'priority': 'high'
        })

        assert response.status_code == 201
        notifications = client.get('/api/user/notifications', headers=user_headers).get_json()['data']
        assert notifications['notifications'][0]['title'] == 'Hello'

    def test_broadcast_reaches_every_member(self, client, admin_headers, user_headers, other_user):
        client.post('/api/notifications', headers=admin_headers, json={
            'title': 'Closed Sunday', 'message': 'Library closed this Sunday', 'send_to_all': True
        })

        notifications = client.get('/api/user/notifications', headers=user_headers).get_json()['data']
        assert [n['title'] for n in notifications['notifications']] == ['Closed Sunday']

    def test_user_id_required_without_broadcast(self, client, admin_headers):
        response = client.post('/api/notifications', headers=admin_headers,
                               json={'title': 'Hello', 'message': 'Nobody'})

        assert response.status_code == 400

    def test_invalid_type(self, client, admin_headers, user):
        response = client.post('/api/notifications', headers=admin_headers,
                               json={'title': 'Hello', 'message': 'x', 'user_id': user.id, 'type': 'spam'})

        assert response.status_code == 400

    def test_mark_read(self, client, admin_headers, user, user_headers):
        notification_id = client.post('/api/notifications', headers=admin_headers, json={
            'title': 'Hello', 'message': 'Welcome', 'user_id': user.id
        }).get_json()['data']['id']

        response = client.put(f'/api/user/notifications/{notification_id}/read', headers=user_headers)

        assert response.status_code == 200
        assert db.session.get(Notification, notification_id).is_read is True


class TestAdminNotifications:
    def test_unread_count_and_mark_all(self, client, admin_headers, user_headers):
        _open_ticket(client, user_headers)
        _open_ticket(client, user_headers, subject='AC too cold')

        count = client.get('/api/admin/admin-notifications/unread-count', headers=admin_headers)
        assert count.get_json()['data']['count'] == 2

        response = client.put('/api/admin/admin-notifications/mark-all-read', headers=admin_headers)

        assert response.get_json()['data']['updated'] == 2
        count = client.get('/api/admin/admin-notifications/unread-count', headers=admin_headers)
        assert count.get_json()['data']['count'] == 0

    def test_delete(self, client, admin_headers, user_headers):
        _open_ticket(client, user_headers)
        notification = AdminNotification.query.first()

        response = client.delete(f'/api/admin/admin-notifications/{notification.id}', headers=admin_headers)

        assert response.status_code == 200
        assert AdminNotification.query.count() == 0
