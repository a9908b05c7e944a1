"""Worker 모듈 - 큐 메시지를 HTTP 잡으로 전달하는 워커풀"""
