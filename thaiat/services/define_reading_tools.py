"""Reading Tool Schema — Anthropic Tool Use format for the structured reading.

Invariants:
    - record_reading input_schema mirrors schemas.reading.ReadingResult
    - Every object lists all of its properties as required
    - READING_TOOL_CHOICE forces the oracle to answer through the tool

Design Decisions:
    - Forced tool call over free-text JSON: the SDK returns parsed input,
      no markdown-fence stripping needed
"""

READING_TOOL_NAME = "record_reading"


def _string(description: str) -> dict:
    return {"type": "string", "description": description}


_HEXAGRAM_CODE = {
    "type": "string",
    "pattern": "^[01]{6}$",
    "description": "Mã nhị phân 6 ký tự (1=Dương, 0=Âm), hào sơ trước.",
}

TOOLS_READING = [
    {
        "name": READING_TOOL_NAME,
        "description": (
            "Ghi lại toàn bộ lời luận giải vận mệnh theo Thái Ất Thần Kinh. "
            "Gọi đúng một lần với đầy đủ các trường."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "hexagram_name": _string("Tên Quẻ Chủ (Ví dụ: Thuần Càn)."),
                "hexagram_code": _HEXAGRAM_CODE,
                "transformed_hexagram": {
                    "type": "object",
                    "description": "Quẻ Biến (Quẻ kết quả sau khi hào động).",
                    "properties": {
                        "code": _HEXAGRAM_CODE,
                        "name": _string("Tên Quẻ Biến (Ví dụ: Thiên Phong Cấu)."),
                        "meaning": _string(
                            "Ý nghĩa ngắn gọn của quẻ biến (Kết quả cuối cùng).",
                        ),
                    },
                    "required": ["code", "name", "meaning"],
                },
                "thai_at_info": {
                    "type": "object",
                    "description": "Thiên Can, Địa Chi, Ngày Âm theo Thái Ất.",
                    "properties": {
                        "lunar_date": _string("Ngày tháng năm Âm lịch."),
                        "can_chi": _string(
                            "Bát tự (Giờ/Ngày/Tháng/Năm can chi).",
                        ),
                        "ruling_star": _string("Sao chủ mệnh chiếu vào giờ sinh."),
                    },
                    "required": ["lunar_date", "can_chi", "ruling_star"],
                },
                "the_ung_analysis": _string(
                    "Luận giải Hào Thế (Bản thân) và Hào Ứng (Môi trường/Người "
                    "khác): Sinh hay Khắc, Tốt hay Xấu, ai thắng ai thua.",
                ),
                "general_analysis": _string(
                    "Luận giải tổng quan vận mệnh. Quyết đoán, không nước đôi.",
                ),
                "elemental_balance": _string("Phân tích ngũ hành bản mệnh."),
                "career_advice": {
                    "type": "object",
                    "properties": {
                        "suitable_careers": {
                            "type": "array", "items": {"type": "string"},
                        },
                        "analysis": {"type": "string"},
                        "potential_success": {"type": "string"},
                    },
                    "required": [
                        "suitable_careers", "analysis", "potential_success",
                    ],
                },
                "poem": _string("Bài thơ sấm truyền tóm lược vận mệnh."),
                "life_stages": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "age_range": {"type": "string"},
                            "summary": {"type": "string"},
                            "details": {"type": "string"},
                            "type": {
                                "type": "string",
                                "enum": ["past", "present", "future"],
                            },
                        },
                        "required": ["age_range", "summary", "details", "type"],
                    },
                },
                "yearly_predictions": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "year": {"type": "integer"},
                            "overview": {"type": "string"},
                            "career": {"type": "string"},
                            "health": {"type": "string"},
                            "love": {"type": "string"},
                            "advice": {
                                "type": "object",
                                "properties": {
                                    "do": _string("Việc nên làm, nên tiến."),
                                    "avoid": _string("Việc nên tránh, nên lùi."),
                                },
                                "required": ["do", "avoid"],
                            },
                        },
                        "required": [
                            "year", "overview", "career", "health", "love",
                            "advice",
                        ],
                    },
                },
                "suggested_questions": {
                    "type": "array", "items": {"type": "string"},
                },
            },
            "required": [
                "hexagram_name", "hexagram_code", "transformed_hexagram",
                "thai_at_info", "the_ung_analysis", "general_analysis",
                "elemental_balance", "career_advice", "poem", "life_stages",
                "yearly_predictions", "suggested_questions",
            ],
        },
    },
]

READING_TOOL_CHOICE = {"type": "tool", "name": READING_TOOL_NAME}
