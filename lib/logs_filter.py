import urllib.parse

ORDER_DESCENDING = "timestamp desc"


def logs_query_policy_changes(time_lower_bound: str = "") -> str:
    query = (
        'log_id("cloudaudit.googleapis.com/activity")\n'
        'resource.type="project"\n'
        'severity=NOTICE\n'
        'protoPayload.methodName="SetIamPolicy"'
    )
    if time_lower_bound:
        query += f'\ntimestamp>"{time_lower_bound}"'
    return query


def build_log_url(query: str, project_id: str) -> str:
    log_query = urllib.parse.quote(query, safe='')
    log_query = log_query.replace('%28', '%2528')
    log_query = log_query.replace('%29', '%2529')
    return f'https://console.cloud.google.com/logs/query;query={log_query}?project={project_id}'


def logs_query_recommendations(time_from: str = "", time_to: str = "") -> str:
    """Applied IAM recommender suggestions within ``[time_from, time_to)``."""
    query = (
        'resource.type="recommender"\n'
        'resource.labels.recommender_id="google.iam.policy.Recommender"\n'
        'jsonPayload.state="SUCCEEDED"'
    )
    if time_from:
        query += f'\ntimestamp>="{time_from}"'
    if time_to:
        query += f'\ntimestamp<"{time_to}"'
    return query
