import requests

from settings import Settings

SETTINGS = Settings(
    base_url="https://solar.test",
    app_key="app",
    secret_key="secret",
    user_account="me@example.com",
    user_password="pw",
)


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self.payload


class FakeSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def post(self, url, json=None, headers=None, timeout=None):
        self.calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def historical_payload():
    return {
        "result_code": "1",
        "result_msg": "success",
        "result_data": {
            "1589518_1_1_1": {
                "p2": [
                    {"time_stamp": "202403", "p2": "1400000"},
                    {"time_stamp": "202401", "p2": "1000000"},
                    {"time_stamp": "202402", "p2": "1500000"},
                ]
            }
        },
    }

