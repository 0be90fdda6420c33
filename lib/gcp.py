from google.auth import default
from googleapiclient import discovery

SCOPES = ["https://www.googleapis.com/auth/cloud-platform"]


def _credentials():
    credentials, _ = default(scopes=SCOPES)
    return credentials


def crm_client(credentials=None):
    # getAncestry only exists in v1
    return discovery.build("cloudresourcemanager", "v1", credentials=credentials or _credentials(),
                           cache_discovery=False)


def iam_client(credentials=None):
    return discovery.build("iam", "v1", credentials=credentials or _credentials(), cache_discovery=False)


def logging_client(credentials=None):
    return discovery.build("logging", "v2", credentials=credentials or _credentials(), cache_discovery=False)
