"""공통 모듈 - 로깅, 메트릭"""
