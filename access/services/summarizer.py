import logging

import requests

from access.errors import Unavailable

logger = logging.getLogger(__name__)

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

PROMPT = (
    "You are a medical AI assistant. Summarize the following medical records "
    "in 2-3 lines and provide an AI analysis report:\n\n{text}"
)


class GeminiSummarizer:
    """Summarizes record text through Gemini's ``generateContent`` endpoint."""

    def __init__(self, api_key: str, *, model: str = 'gemini-1.5-flash', timeout: int = 30):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

    def summarize(self, text: str) -> str:
        if not self.api_key:
            raise Unavailable('Gemini API key not configured.')
        try:
            r = requests.post(
                GEMINI_URL.format(model=self.model),
                params={'key': self.api_key},
                json={
                    'contents': [{'parts': [{'text': PROMPT.format(text=text)}]}],
                    'generationConfig': {'temperature': 0.3, 'maxOutputTokens': 300},
                },
                headers={'Content-Type': 'application/json'},
                timeout=self.timeout,
            )
            r.raise_for_status()
            # candidates[0].content.parts[0].text
            summary = r.json()['candidates'][0]['content']['parts'][0]['text']
        except requests.RequestException as e:
            raise Unavailable(f'Gemini request failed: {e}') from e
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise Unavailable('No summary returned.') from e
        if not summary:
            raise Unavailable('No summary returned.')
        return summary
