"""데이터 접근 레포지토리 패키지.

Data access repositories. Each module exposes a singleton instance that takes
an ``AsyncSession`` as the first argument of every call.
"""
