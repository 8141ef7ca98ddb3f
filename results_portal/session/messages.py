"""Fixed user-facing strings (Arabic)."""

LOAD_SUCCEEDED = "تم تحميل قاعدة البيانات بنجاح"
LOAD_FAILED_NOTICE = "فشل تحميل ملف البيانات"
LOAD_FAILED = "تعذر تحميل ملف البيانات. يرجى التأكد من وجود ملف result.csv"

RECORD_NOT_FOUND = "حدث خطأ غير متوقع. لم يتم العثور على الطالب."
CREDENTIAL_MISMATCH = "البيانات المدخلة غير صحيحة. يرجى التأكد من تاريخ الميلاد ورقم الموبايل المسجل."

RESULT_VERIFIED = "تم التحقق من البيانات بنجاح"
SCORE1_LABEL = "الدرجة الأولى"
SCORE2_LABEL = "الدرجة الثانية"
