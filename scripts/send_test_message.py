"""SQS 테스트 메시지 전송 (로컬 ElasticMQ 확인용)"""
import json
import sys
from pathlib import Path

import boto3

sys.path.insert(0, str(Path(__file__).parent.parent))

from main import DEFAULT_CONFIG_PATH, load_config


def send_test_message(count: int = 1) -> None:
    config = load_config(DEFAULT_CONFIG_PATH)
    client = boto3.client(
        "sqs",
        region_name=config.sqs.region,
        endpoint_url=config.sqs.endpoint_url,
        aws_access_key_id=config.sqs.aws_access_key_id,
        aws_secret_access_key=config.sqs.aws_secret_access_key,
    )

    for i in range(count):
        message = {"task": "sample", "sequence": i}
        response = client.send_message(
            QueueUrl=config.worker.queue_url,
            MessageBody=json.dumps(message),
        )
        print(f"Sent: {message} (MessageId={response['MessageId']})")


if __name__ == "__main__":
    send_test_message(int(sys.argv[1]) if len(sys.argv) > 1 else 1)
