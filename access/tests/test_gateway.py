import pytest

from access.errors import InvalidArgument, NotFound, PermissionDenied
from access.models import AccessRequest, HealthRecord
from access.services.directory import MigrantDirectory
from access.services.gateway import SUMMARY_FALLBACK, RecordGateway
from access.services.grants import AccessGrantService
from access.services.stores import DjangoAccessRequestStore, DjangoRecordStore

from conftest import FakeSummarizer

pytestmark = pytest.mark.django_db


@pytest.fixture
def grants(notifier, clock):
    return AccessGrantService(DjangoAccessRequestStore(), MigrantDirectory(), notifier, clock=clock)


@pytest.fixture
def summarizer():
    return FakeSummarizer(reply='Stable. No acute findings.')


@pytest.fixture
def gateway(grants, summarizer, clock):
    return RecordGateway(grants, DjangoRecordStore(), MigrantDirectory(), summarizer, clock=clock)


def grant(grants, owner_id, requester_id):
    ar = grants.request_access(owner_id, requester_id)
    return grants.verify_otp(ar.id, ar.otp_code)


def test_every_operation_requires_a_grant(gateway, migrant):
    HealthRecord.objects.create(owner_id=migrant.unique_id, title='BP', content='120/80')
    calls = [
        lambda: gateway.read_records(migrant.unique_id, 'D1'),
        lambda: gateway.write_record(migrant.unique_id, 'D1', 'Note', 'text'),
        lambda: gateway.read_owner_profile(migrant.unique_id, 'D1'),
        lambda: gateway.summarize(migrant.unique_id, 'D1'),
    ]
    for call in calls:
        with pytest.raises(PermissionDenied):
            call()
    assert HealthRecord.objects.filter(owner_id=migrant.unique_id).count() == 1


def test_pending_or_expired_requests_do_not_grant(gateway, grants, migrant):
    ar = grants.request_access(migrant.unique_id, 'D1')
    with pytest.raises(PermissionDenied):
        gateway.read_records(migrant.unique_id, 'D1')

    AccessRequest.objects.filter(pk=ar.id).update(status=AccessRequest.STATUS_EXPIRED)
    with pytest.raises(PermissionDenied):
        gateway.read_records(migrant.unique_id, 'D1')


def test_grant_for_one_doctor_does_not_cover_another(gateway, grants, migrant):
    grant(grants, migrant.unique_id, 'D1')
    with pytest.raises(PermissionDenied):
        gateway.read_records(migrant.unique_id, 'D2')


def test_write_then_read_newest_first(gateway, grants, migrant, clock):
    grant(grants, migrant.unique_id, 'D1')
    gateway.write_record(migrant.unique_id, 'D1', 'Visit 1', 'fever')
    clock.advance(minutes=1)
    rec = gateway.write_record(migrant.unique_id, 'D1', 'Visit 2', 'recovered')

    assert rec.author_id == 'D1'
    assert rec.owner_id == migrant.unique_id
    assert rec.created_at == clock()
    assert [r.title for r in gateway.read_records(migrant.unique_id, 'D1')] == ['Visit 2', 'Visit 1']


@pytest.mark.parametrize('title,content', [('', 'x'), ('x', ''), ('   ', 'x'), (None, 'x')])
def test_write_requires_title_and_content(gateway, grants, migrant, title, content):
    grant(grants, migrant.unique_id, 'D1')
    with pytest.raises(InvalidArgument):
        gateway.write_record(migrant.unique_id, 'D1', title, content)
    assert not HealthRecord.objects.exists()


def test_write_validation_comes_before_the_grant_check(gateway, migrant):
    with pytest.raises(InvalidArgument):
        gateway.write_record(migrant.unique_id, 'D1', '', '')


def test_write_strips_markup(gateway, grants, migrant):
    grant(grants, migrant.unique_id, 'D1')
    rec = gateway.write_record(migrant.unique_id, 'D1', '<span>Lab</span>', '<script>x</script>Hb 13')
    assert rec.title == 'Lab'
    assert '<script>' not in rec.content and 'Hb 13' in rec.content


def test_profile_is_redacted(gateway, grants, migrant):
    grant(grants, migrant.unique_id, 'D1')
    data = gateway.read_owner_profile(migrant.unique_id, 'D1').as_dict()
    assert data == {
        'unique_id': 'M1', 'name': 'Ravi Kumar', 'phone': '+910000000001',
        'dob': None, 'gender': 'male', 'language': 'ml',
    }


def test_profile_of_missing_owner(gateway, grants, migrant):
    grant(grants, migrant.unique_id, 'D1')
    # a grant row can outlive its owner
    migrant.delete()
    with pytest.raises(NotFound):
        gateway.read_owner_profile('M1', 'D1')


def test_summarize_uses_the_ten_newest_records(gateway, grants, migrant, summarizer, clock):
    grant(grants, migrant.unique_id, 'D1')
    for i in range(12):
        clock.advance(minutes=1)
        gateway.write_record(migrant.unique_id, 'D1', f'T{i}', f'C{i}')

    assert gateway.summarize(migrant.unique_id, 'D1') == 'Stable. No acute findings.'
    text = summarizer.texts[-1]
    assert text.split('\n\n')[0] == 'T11: C11'
    assert len(text.split('\n\n')) == 10
    assert 'T1: C1' not in text


def test_summarize_without_records(gateway, grants, migrant, summarizer):
    grant(grants, migrant.unique_id, 'D1')
    gateway.summarize(migrant.unique_id, 'D1')
    assert summarizer.texts == ['No records']


def test_summarizer_failure_returns_fallback(grants, migrant, clock):
    gateway = RecordGateway(grants, DjangoRecordStore(), MigrantDirectory(), FakeSummarizer(fail=True), clock=clock)
    grant(grants, migrant.unique_id, 'D1')
    assert gateway.summarize(migrant.unique_id, 'D1') == SUMMARY_FALLBACK


def test_summary_limit_is_capped(grants):
    gw = RecordGateway(grants, DjangoRecordStore(), MigrantDirectory(), FakeSummarizer(), summary_limit=50)
    assert gw.summary_limit == 10
    gw = RecordGateway(grants, DjangoRecordStore(), MigrantDirectory(), FakeSummarizer(), summary_limit=0)
    assert gw.summary_limit == 1


def test_write_keeps_comparison_signs_and_ampersands(gateway, grants, migrant):
    grant(grants, migrant.unique_id, 'D1')
    gateway.write_record(migrant.unique_id, 'D1', 'Labs & vitals', 'BP < 120/80 & Hb > 13')

    rec = gateway.read_records(migrant.unique_id, 'D1')[0]
    assert rec.title == 'Labs & vitals'
    assert rec.content == 'BP < 120/80 & Hb > 13'
    stored = HealthRecord.objects.get(pk=rec.pk)
    assert stored.content == 'BP < 120/80 & Hb > 13'
