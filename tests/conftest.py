import io
import os
import sys

import pytest
from botocore.exceptions import ClientError

ROOT = os.path.dirname(os.path.dirname(__file__))
sys.path.insert(0, os.path.join(ROOT, "common", "layers", "common-utils", "python"))
sys.path.insert(0, os.path.join(ROOT, "common", "layers", "ses-forwarder-layer", "python"))


class DummyS3:
    def __init__(self):
        self.objects = {}
        self.calls = []

    def get_object(self, Bucket, Key):
        self.calls.append((Bucket, Key))
        if (Bucket, Key) not in self.objects:
            raise ClientError({"Error": {"Code": "NoSuchKey"}}, "GetObject")
        return {"Body": io.BytesIO(self.objects[(Bucket, Key)])}


class DummySES:
    def __init__(self):
        self.sent = []
        self.error = None

    def send_raw_email(self, **kwargs):
        if self.error is not None:
            raise self.error
        self.sent.append(kwargs)
        return {"MessageId": f"msg-{len(self.sent)}"}


class DummySSM:
    def __init__(self):
        self.params = {}
        self.calls = []

    def get_parameter(self, Name, WithDecryption=False):
        self.calls.append((Name, WithDecryption))
        if Name not in self.params:
            raise ClientError({"Error": {"Code": "ParameterNotFound"}}, "GetParameter")
        param = {"Name": Name, "Type": "String"}
        if self.params[Name] is not None:
            param["Value"] = self.params[Name]
        return {"Parameter": param}


@pytest.fixture(autouse=True)
def aws_env(monkeypatch):
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    for name in ("LOG_LEVEL", "LOG_JSON"):
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def s3_stub():
    return DummyS3()


@pytest.fixture
def ses_stub():
    return DummySES()


@pytest.fixture
def ssm_stub():
    return DummySSM()


@pytest.fixture
def raw_email():
    return (
        b"Return-Path: <bounce@sender.example>\r\n"
        b"DKIM-Signature: v=1; a=rsa-sha256; d=sender.example;\r\n"
        b"\tb=abc123\r\n"
        b"DKIM-Signature: v=1; a=rsa-sha256; d=relay.example; b=def456\r\n"
        b"Message-ID: <1234@sender.example>\r\n"
        b"Sender: list@sender.example\r\n"
        b"From: Jane Doe <jane@sender.example>\r\n"
        b"To: info@example.com\r\n"
        b"Cc: sales+promo@example.com\r\n"
        b"Subject: Quarterly report\r\n"
        b"Content-Type: text/plain; charset=utf-8\r\n"
        b"\r\n"
        b"Hello there,\r\n"
        b"Please find the numbers below.\r\n"
    )


def _ses_event(message_id="abc123", recipients=("info@example.com",)):
    return {
        "Records": [
            {
                "eventSource": "aws:ses",
                "eventVersion": "1.0",
                "ses": {
                    "mail": {
                        "messageId": message_id,
                        "source": "jane@sender.example",
                        "destination": list(recipients),
                    },
                    "receipt": {"recipients": list(recipients)},
                },
            }
        ]
    }


def _s3_event(bucket="mail-bucket", key="inbound/abc123"):
    return {
        "Records": [
            {
                "eventSource": "aws:s3",
                "eventName": "ObjectCreated:Put",
                "s3": {"bucket": {"name": bucket}, "object": {"key": key}},
            }
        ]
    }


@pytest.fixture
def ses_event():
    return _ses_event


@pytest.fixture
def s3_event():
    return _s3_event
