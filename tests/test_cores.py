from cores.models import AuditLog, PlatformSetting


def test_settings_update_is_audited(api_client, admin_user):
    api_client.force_authenticate(user=admin_user)

    response = api_client.put('/api/core/settings/', {'site_name': 'Ward 7 forms'}, format='json')
    assert response.status_code == 200
    assert response.data['site_name'] == 'Ward 7 forms'
    assert PlatformSetting.load().site_name == 'Ward 7 forms'

    log = AuditLog.objects.get(action='SETTINGS')
    assert log.details == 'Updated platform settings: site_name'
    assert log.ip_address == '127.0.0.1'


def test_settings_reject_bad_values(api_client, admin_user):
    api_client.force_authenticate(user=admin_user)
    response = api_client.put('/api/core/settings/', {'support_email': 'not-an-email'}, format='json')
    assert response.status_code == 400
    assert not AuditLog.objects.exists()


def test_audit_log_filters(api_client, admin_user, teacher):
    AuditLog.objects.create(actor=teacher, action='CREATE', target_model='Item', target_object_id='4')
    AuditLog.objects.create(actor=teacher, action='DELETE', target_model='Completed', target_object_id='9')
    AuditLog.objects.create(actor=admin_user, action='DELETE', target_model='Item', target_object_id='4')
    api_client.force_authenticate(user=admin_user)

    rows = api_client.get('/api/core/audit-logs/', {'action': 'DELETE'}).data
    assert [row['target_model'] for row in rows] == ['Item', 'Completed']

    rows = api_client.get('/api/core/audit-logs/', {'target_model': 'Item', 'target_object_id': '4'}).data
    assert len(rows) == 2

    rows = api_client.get('/api/core/audit-logs/', {'actor': teacher.id}).data
    assert {row['actor_email'] for row in rows} == {teacher.email}


def test_audit_log_is_for_admins(api_client, teacher):
    api_client.force_authenticate(user=teacher)
    assert api_client.get('/api/core/audit-logs/').status_code == 403
