"""
Sample free-text reports stored by demo analyses (no engine call).
"""

EXAMPLE_REVIEW = """이력서 첨삭 결과 요약입니다. 문서 가독성은 양호하며 프로젝트 경험이 잘 드러납니다. 다만 성과를 결과 중심으로 다듬으면 서류 통과 가능성이 높아집니다. 아래 항목별 점수를 참고하세요.

총점 72점

기술 역량: 80점
문제 해결: 70점
학습 및 성장: 75점
오너십: 60점
협업 및 소통: 68점

강점
- React와 TypeScript 기반 프로젝트 경험이 풍부함
- 새로운 기술을 빠르게 익혀 실무에 적용함

아쉽거나 부족한 점
- 성과를 수치로 표현하지 않음
- 리딩 경험에 대한 서술이 짧음

추천 액션
- 주요 프로젝트에 성능 개선 수치를 추가하세요
- 팀 안에서 맡은 역할과 의사결정 과정을 구체적으로 적으세요
"""

EXAMPLE_COMPARISON = """지원 공고와 이력서 비교 결과입니다. 공고가 요구하는 기술과의 일치도가 높고 유사 서비스 경험이 있습니다. 대규모 트래픽 운영 경험은 확인되지 않았습니다.

총점 68점

직무 기술 적합성: 32/40점
유사 프로덕트 경험: 15/20점
개인 역량: 12/20점
커뮤니케이션: 9/20점

강점
- 공고의 주요 스택(Next.js, TypeScript)을 실무에서 사용함
- 커머스 도메인 프로덕트 경험

부족한 점
- 대용량 트래픽 대응 경험이 드러나지 않음
- 테스트 자동화 경험 서술 없음

스토리텔링 제안
- 커머스 프로젝트의 전환율 개선 사례를 첫 문단에 배치하세요
- 장애 대응 경험이 있다면 짧게라도 추가하세요
"""

DEMO_REPORTS = {
    "review": EXAMPLE_REVIEW,
    "comparison": EXAMPLE_COMPARISON,
}
