"""Shared constants for the RSCMP client."""

# Roles in the order the role selection screen offers them
ROLE_PUBLIC = "Public"
ROLE_REVIEWER = "Reviewer"
ROLE_CHAIRMAN = "Chairman"
ROLE_ADMIN = "Admin"

ROLE_SELECTION_ORDER = [ROLE_REVIEWER, ROLE_CHAIRMAN, ROLE_ADMIN, ROLE_PUBLIC]

ROLE_DASHBOARDS = {
    ROLE_ADMIN: "/admin",
    ROLE_CHAIRMAN: "/chairman",
    ROLE_REVIEWER: "/reviewer",
    ROLE_PUBLIC: "/my-submissions",
}

# Values the "choose role" landing page stores as the intendedRole hint
INTENDED_ROLE_MAP = {
    "researcher": ROLE_PUBLIC,
    "reviewer": ROLE_REVIEWER,
    "chairman": ROLE_CHAIRMAN,
    "admin": ROLE_ADMIN,
}

ROLE_SELECTION_ROUTE = "/role-selection"
SELECT_ROLE_ROUTE = "/select-role"
LOGIN_ROUTE = "/login"
HOME_ROUTE = "/"

AVAILABLE_LANGUAGES = ["en", "ar"]

# Client storage keys
AUTH_STORAGE_KEY = "rscmp-auth"
UI_STORAGE_KEY = "rscmp-ui"

DEFAULT_PAGE_SIZE = 10

# Recommendation / decision options in display order
DECISION_OPTIONS = ["Approved", "RevisionRequired", "Rejected"]

DEFAULT_FILE_TYPE = "MainDocument"

# Bilingual toast texts (Arabic | English), as the server also formats them
MSG_SERVER_ERROR = "خطأ في الخادم. يرجى المحاولة لاحقاً. | Server error. Please try again later."
MSG_FORBIDDEN = "غير مصرح لك بهذا الإجراء | You are not authorized for this action"
MSG_CONNECTION_ERROR = "خطأ في الاتصال. يرجى التحقق من الإنترنت | Connection error. Please check your internet"
MSG_GENERIC_ERROR = "حدث خطأ غير متوقع | An unexpected error occurred"
MSG_INVALID_CREDENTIALS = "بيانات الدخول غير صحيحة | Invalid email or password"
MSG_SUCCESS = "تمت العملية بنجاح | Operation completed successfully"
MSG_ALL_MARKED_READ = "تم تحديد الكل كمقروء | All marked as read"
MSG_REVIEW_STARTED = "بدأت المراجعة | Review started"
MSG_REVIEW_DECLINED = "تم رفض المراجعة | Review declined"
MSG_DOWNLOAD_FAILED = "فشل التحميل | Download failed"
MSG_INCOMPLETE_SCORES = "يجب تقييم جميع المعايير | All criteria must be scored"
MSG_DECISION_EXISTS = "تم اتخاذ القرار بالفعل | Decision already made"
