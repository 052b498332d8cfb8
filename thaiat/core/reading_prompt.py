"""Reading Prompts — pure builders for the reading and follow-up requests.

Invariants:
    - All functions are pure (no IO, no clock): current_year is passed in
    - Precomputed Can Chi facts appear verbatim in the reading prompt
    - Follow-up prompt is anchored on the reading's main and transformed hexagrams

Design Decisions:
    - Prompt text stays Vietnamese end to end: the persona is Trạng Trình and
      the rendered reading is shown to Vietnamese readers as-is
    - Interpretation rules forbid hedging ("ba phải"); the oracle must commit
      to Cát or Hung
"""

import math

from thaiat.core.calendar_facts import CalendarFacts
from thaiat.core.domain_types import Gender

FORECAST_YEARS = 5
FOLLOW_UP_WORD_LIMIT = 150

_PERSONA = (
    'Đóng vai Trạng Trình Nguyễn Bỉnh Khiêm, thực hiện phép '
    '"Thái Ất Thần Kinh" để luận giải.'
)

_RULES = """**Quy tắc luận giải (BẮT BUỘC TUÂN THỦ):**
1. **Tính Bát Tự & Lập Quẻ:** Dùng Can Chi đã tính sẵn ở trên, chuyển đổi ngày sinh sang Âm Lịch. Lập ra **Quẻ Chủ** (đại diện hiện tại/bản chất) và **Quẻ Biến** (đại diện kết quả/tương lai).
2. **Luận Thế - Ứng (Quan trọng):** Phân tích Hào Thế (Bản thân) và Hào Ứng (Đối phương/Hoàn cảnh).
   - Thế khắc Ứng hay Ứng khắc Thế?
   - Thế sinh Ứng hay Ứng sinh Thế?
   -> Từ đó kết luận dứt khoát: Là Thuận lợi (Cát) hay Khó khăn (Hung). **Tuyệt đối không nói "tuy nhiên có thể...", "nhưng cũng cần lưu ý..." theo kiểu nước đôi.** Nếu xấu nói xấu, tốt nói tốt.
3. **Thái độ:** Lời văn cổ điển, uy nghiêm, quyết đoán, thấu tận tâm can.
4. **Nghề nghiệp:** Dựa vào Dụng Thần trong quẻ để chỉ rõ ngành nghề đắc dụng."""


def format_calendar_facts(facts: CalendarFacts) -> str:
    """Render the Can Chi block as prompt lines."""
    lines = [
        f"- Năm sinh (Can Chi): {facts.year}",
        f"- Ngày sinh (Can Chi): {facts.day}",
    ]
    if facts.hour is not None:
        lines.append(f"- Giờ sinh (Can Chi): {facts.hour}")
    lines.append(
        f"- Số ngày Julius: {math.floor(facts.julian_day + 0.5)} "
        f"(Can ngày chỉ số {facts.day_stem_index})",
    )
    return "\n".join(lines)


def build_reading_prompt(
    full_name: str,
    birth_date: str,
    birth_time: str,
    gender: Gender,
    facts: CalendarFacts,
    current_year: int,
) -> str:
    last_year = current_year + FORECAST_YEARS - 1
    return f"""{_PERSONA}

**Thông tin đương số:**
- Tên: {full_name}
- Dương lịch: {birth_date} - Giờ: {birth_time}
- Giới tính: {gender.label_vi}

**Can Chi đã tính sẵn (dùng nguyên văn, không tính lại):**
{format_calendar_facts(facts)}

{_RULES}

**Yêu cầu đầu ra:**
- Xác định chính xác Quẻ Chủ và Quẻ Biến.
- Cung cấp thông tin Can Chi, Sao Chủ Mệnh.
- Dự báo {FORECAST_YEARS} năm tới ({current_year}-{last_year}) phải chỉ rõ: Năm nào phát, năm nào bại.
- Lời khuyên "Tiến - Lùi" phải cụ thể hành động (Ví dụ: "Năm nay tuyệt đối không hùn vốn", thay vì "Cẩn thận tài chính").
- Ghi kết quả bằng công cụ record_reading."""


def build_follow_up_prompt(
    question: str, hexagram_name: str, transformed_hexagram_name: str,
) -> str:
    return f"""Bạn là Trạng Trình Nguyễn Bỉnh Khiêm. Đang luận giải quẻ: {hexagram_name} biến sang {transformed_hexagram_name}.

Tín chủ hỏi: "{question.strip()}"

Yêu cầu:
- Trả lời dứt khoát dựa trên tượng quẻ và sự sinh khắc Ngũ Hành.
- Không dùng từ ngữ ba phải, nước đôi.
- Nếu quẻ xấu, hãy chỉ thẳng thắn và đưa cách hóa giải (nếu có).
- Ngắn gọn, súc tích (dưới {FOLLOW_UP_WORD_LIMIT} chữ)."""
