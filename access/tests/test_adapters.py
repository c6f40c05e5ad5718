import pytest
import requests

from access import container
from access.errors import Unavailable
from access.services import notifications, summarizer
from access.services.notifications import LogNotifier, TwilioSmsNotifier
from access.services.summarizer import GeminiSummarizer


class FakeResponse:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status_code = status

    def json(self):
        return self.payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f'{self.status_code} error')


class HtmlResponse(FakeResponse):
    """A 2xx reply whose body is not JSON, as from a captive portal."""

    def __init__(self):
        super().__init__(None, 200)

    def json(self):
        raise requests.JSONDecodeError('Expecting value', '<html>', 0)


def capture_post(monkeypatch, module, response):
    calls = []

    def fake_post(url, **kwargs):
        calls.append((url, kwargs))
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(module.requests, 'post', fake_post)
    return calls


def test_twilio_posts_message(monkeypatch):
    calls = capture_post(monkeypatch, notifications, FakeResponse({'sid': 'SM1'}, 201))
    TwilioSmsNotifier('AC1', 'tok', '+15550000000').deliver('+910000000001', 'Your Arogya Saathi OTP is 123456')

    url, kwargs = calls[0]
    assert url == 'https://api.twilio.com/2010-04-01/Accounts/AC1/Messages.json'
    assert kwargs['data'] == {'To': '+910000000001', 'From': '+15550000000',
                              'Body': 'Your Arogya Saathi OTP is 123456'}
    assert kwargs['auth'] == ('AC1', 'tok')


@pytest.mark.parametrize('response', [
    requests.ConnectionError('down'),
    FakeResponse({'message': 'bad'}, 400),
    FakeResponse({'error_code': 21211, 'error_message': 'invalid To'}),
    HtmlResponse(),
    FakeResponse(['not', 'a', 'dict']),
])
def test_twilio_failures_raise_unavailable(monkeypatch, response):
    capture_post(monkeypatch, notifications, response)
    with pytest.raises(Unavailable):
        TwilioSmsNotifier('AC1', 'tok', '+15550000000').deliver('+91', 'hi')


def test_log_notifier_logs_message(caplog):
    with caplog.at_level('WARNING', logger='access.services.notifications'):
        LogNotifier().deliver('+910000000001', 'Your Arogya Saathi OTP is 654321')
    assert '654321' in caplog.text


def test_gemini_returns_first_candidate(monkeypatch):
    payload = {'candidates': [{'content': {'parts': [{'text': 'All normal.'}]}}]}
    calls = capture_post(monkeypatch, summarizer, FakeResponse(payload))

    assert GeminiSummarizer('k', model='gemini-1.5-flash').summarize('BP: 120/80') == 'All normal.'
    url, kwargs = calls[0]
    assert url.endswith('/models/gemini-1.5-flash:generateContent')
    assert kwargs['params'] == {'key': 'k'}
    assert kwargs['json']['generationConfig'] == {'temperature': 0.3, 'maxOutputTokens': 300}
    assert 'BP: 120/80' in kwargs['json']['contents'][0]['parts'][0]['text']


@pytest.mark.parametrize('response', [
    requests.Timeout('slow'),
    FakeResponse({}, 500),
    FakeResponse({'candidates': []}),
    FakeResponse({'candidates': [{'content': {'parts': [{'text': ''}]}}]}),
])
def test_gemini_failures_raise_unavailable(monkeypatch, response):
    capture_post(monkeypatch, summarizer, response)
    with pytest.raises(Unavailable):
        GeminiSummarizer('k').summarize('x')


def test_gemini_without_key_makes_no_call(monkeypatch):
    calls = capture_post(monkeypatch, summarizer, FakeResponse({}))
    with pytest.raises(Unavailable):
        GeminiSummarizer('').summarize('x')
    assert calls == []


def test_container_picks_notifier_from_settings(settings):
    settings.TWILIO_SID = ''
    assert isinstance(container.build_notifier(), LogNotifier)
    settings.TWILIO_SID = 'AC1'
    settings.TWILIO_TOKEN = 'tok'
    settings.TWILIO_FROM = '+15550000000'
    assert isinstance(container.build_notifier(), TwilioSmsNotifier)


def test_unreadable_twilio_reply_does_not_fail_the_request(monkeypatch, clock):
    from access.models import AccessRequest
    from access.services.grants import AccessGrantService
    from access.services.stores import InMemoryAccessRequestStore
    from conftest import StaticDirectory

    capture_post(monkeypatch, notifications, HtmlResponse())
    store = InMemoryAccessRequestStore()
    svc = AccessGrantService(store, StaticDirectory({'M1': '+910000000001'}),
                             TwilioSmsNotifier('AC1', 'tok', '+15550000000'), clock=clock)

    ar = svc.request_access('M1', 'D1')
    assert store.get(ar.id).status == AccessRequest.STATUS_PENDING
    assert svc.verify_otp(ar.id, ar.otp_code).status == AccessRequest.STATUS_GRANTED
