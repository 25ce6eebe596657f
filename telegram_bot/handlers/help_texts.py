"""Reply texts used by the telegram bot."""

WELCOME_TEXT = "👋 안녕하세요! 아주대학교 공지사항 알림봇입니다. 알림을 받고 싶으시다면 명령어를 확인해주세요."

HELP_TEXT = """📖 사용 가능한 명령어

/subscribe - 공지사항 알림 받기
/unsubscribe - 공지사항 알림 끄기
/category - 카테고리 필터 등록
/department - 공지부서 필터 등록
/keyword - 키워드 필터 등록
/filters - 현재 필터 확인
/reset - 모든 필터 초기화
/help - 도움말 보기"""

SUBSCRIBED_TEXT = "🔔 공지사항 알림을 받습니다."
ALREADY_SUBSCRIBED_TEXT = "✅ 이미 알림을 받고 있습니다."
UNSUBSCRIBED_TEXT = "🚫 더이상 공지사항 알림을 받지 않습니다."
NOT_SUBSCRIBED_TEXT = "🚫 현재 공지사항 알림을 받지 않고 있습니다."
FILTER_UPDATED_TEXT = "🔔 공지사항 알림 필터링 조건을 변경했습니다."
FILTERS_RESET_TEXT = "🔔 공지사항 알림 필터를 모두 초기화했습니다."
NO_FILTERS_TEXT = "🔎 등록된 필터가 없습니다. 모든 공지사항 알림을 받습니다."
FILTERS_HEADER_TEXT = "🔎 현재 등록된 필터"
ERROR_TEXT = "❗ 오류가 발생했습니다"
