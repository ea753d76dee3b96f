"""
Service context for log lines.

Identifies which process produced a log line when several booking workers
write to the same collector.
"""

import os
from functools import lru_cache


@lru_cache(maxsize=1)
def get_service_context() -> str:
    service_name = get_service_name()
    deploy_env = os.getenv('DEPLOY_ENV', 'local_dev')

    # Container hostname is the most stable id in orchestrated deployments
    instance_id = os.getenv('HOSTNAME', '')[:12] or str(os.getpid())

    return f'{service_name}@{deploy_env}:{instance_id}'


def get_service_name() -> str:
    return os.getenv('SERVICE_NAME', 'tier-booking')
