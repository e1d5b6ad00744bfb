"""Prompt templates for AI refinement and AI-only extraction (Vietnamese)."""

from __future__ import annotations

from name_hunter.models.term_candidate import TermCandidate, TermType

_REFINE_SYSTEM_PROMPT = """\
Bạn là một chuyên gia hiệu đính truyện võ hiệp, tiên hiệp và lịch sử cổ đại.
Nhiệm vụ: Phân loại danh sách từ được cung cấp vào các nhóm: Person, Location, Organization, Skill, Junk.

QUY TẮC PHÂN LOẠI:
- Person: Tên riêng người, nhân vật (VD: Tào Tháo, Lưu Bị, Quan Vũ).
- Location: Địa danh, thành trì, quận huyện, núi sông (VD: Thọ Xuân, Giang Đông, Lạc Dương, Trường Giang, núi Võ Đang).
- Organization: Tông môn, bang phái, quân đội, triều đình (VD: Thiếu Lâm, Cái Bang, Tào quân).
- Skill: Công pháp, chiêu thức, kỹ năng (VD: Giáng Long Thập Bát Chưởng, Thái Cực Quyền).
- Junk: Từ rác, động từ, danh từ chung, hoặc từ ghép sai (VD: Đi tới, Nói rằng, Thanh kiếm).

LƯU Ý: Bạn là một JSON API server. KHÔNG GIẢI THÍCH, KHÔNG CHÀO HỎI.
Chỉ trả về duy nhất một mảng JSON các object.
Mỗi object có "original" (tên gốc, giữ nguyên như trong danh sách) và "type" (loại)."""

_EXTRACT_SYSTEM_PROMPT = """\
Bạn là chuyên gia trích xuất thực thể (NER) từ truyện Trung Quốc.
Nhiệm vụ: Tìm và trích xuất TẤT CẢ các thực thể quan trọng xuất hiện trong đoạn văn bản được cung cấp.

YÊU CẦU ĐẦU RA (JSON BẮT BUỘC):
- Trả về JSON ARRAY chứa các object.
- Mỗi object: {"original": "Tên Hán Việt hoặc dịch", "chinese": "Chữ Hán gốc (nếu có)", "type": "Tên loại (Person/Location/...)", "description": "Giải nghĩa ngắn gọn vai trò hoặc ngữ cảnh"}
- Nếu văn bản có tiếng Trung, hãy lấy cả chữ Hán vào trường "chinese".
- Nếu văn bản chỉ có tiếng Việt, hãy đoán chữ Hán hoặc để trống trường "chinese".
- KHÔNG GIẢI THÍCH. KHÔNG CHÀO HỎI."""

REFINE_CONTEXT_CHARS = 1500

TYPE_DEFINITIONS: dict[TermType, str] = {
    TermType.PERSON: "Tên riêng người, nhân vật (VD: Tào Tháo, Lưu Bị).",
    TermType.LOCATION: "Địa danh, thành trì, núi sông (VD: Lạc Dương, Trường Giang).",
    TermType.ORGANIZATION: "Tông môn, bang phái, triều đình (VD: Thiếu Lâm, Cái Bang).",
    TermType.SKILL: "Công pháp, chiêu thức, kỹ năng (VD: Thái Cực Quyền).",
    TermType.UNKNOWN: "Các thuật ngữ quan trọng khác.",
}


def build_refine_prompt(
    candidates: list[TermCandidate], context_text: str = "",
) -> tuple[str, str]:
    """Build system + user prompt asking the LLM to label each candidate.

    At most ``REFINE_CONTEXT_CHARS`` of ``context_text`` are quoted ahead of the list.
    Returns (system_prompt, user_prompt).
    """
    lines = []
    snippet = context_text.strip()[:REFINE_CONTEXT_CHARS]
    if snippet:
        lines.extend(["NGỮ CẢNH (trích đoạn):", '"""', snippet, '"""', ""])
    lines.append("DANH SÁCH CẦN PHÂN LOẠI:")
    lines.extend(f"- {c.original}" for c in candidates)
    lines.append("")
    lines.append("JSON ARRAY:")
    return _REFINE_SYSTEM_PROMPT, "\n".join(lines)


def build_extraction_prompt(
    text_snippet: str, allowed_types: list[TermType],
) -> tuple[str, str]:
    """Build system + user prompt for direct entity extraction from one chunk.

    Returns (system_prompt, user_prompt).
    """
    lines = ["CHỈ TRÍCH XUẤT CÁC LOẠI SAU (Sử dụng đúng nhãn loại này):"]
    for term_type in allowed_types:
        lines.append(f"- {term_type.value}: {TYPE_DEFINITIONS.get(term_type, '')}")
    lines.append("")
    lines.append("VĂN BẢN GỐC:")
    lines.append('"""')
    lines.append(text_snippet)
    lines.append('"""')
    lines.append("")
    lines.append("JSON:")
    return _EXTRACT_SYSTEM_PROMPT, "\n".join(lines)
