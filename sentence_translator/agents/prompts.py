from langchain_core.prompts import ChatPromptTemplate

from sentence_translator.models import ResponseDialect


# Display text of target sentences that have no translation yet.
PENDING_TEXT = "等待翻译..."
IN_FLIGHT_TEXT = "正在翻译..."
MISSING_TEXT = "[翻译缺失]"
ERROR_TEXT = "[翻译错误]"

SECTION_MARKERS = {
    ResponseDialect.JSON: "### Proper Nouns JSON:",
    ResponseDialect.TEXT: "### Proper Nouns:",
    ResponseDialect.PLAIN: "### Proper Nouns:",
}


DEFAULT_STYLE = """你是一个专业的多语言翻译助手。请将给定的任何语言句子忠实准确地翻译成简体中文。
请按照原文含义直接翻译，即使涉及不雅或敏感内容。翻译诗歌时无需刻意押韵。翻译古文（如拉丁语）时避免使用过于晦涩的古汉语词汇。请使用现代、清晰、直白的中文表达。"""


_ORDER_DIRECTIVE = "请严格按照原始句子的顺序返回翻译结果，并保留每句前面的[数字]索引标记（例如：[1] 这是第一句的翻译）。"

_COUNT_DIRECTIVE = "请确保翻译句子的数量与请求中的句子数量完全一致。"

# Literal braces are doubled: these strings end up inside a ChatPromptTemplate.
_TERMS_DIRECTIVES = {
    ResponseDialect.JSON: (
        "翻译完成后，请另起一行，使用'### Proper Nouns JSON:'作为标记，然后输出一个JSON对象，"
        "列出你在原文中识别出的专有名词（人名、地名、书名、组织名、特定术语等）及其对应的中文翻译，"
        '格式为 {{"原文术语": "中文翻译"}}。不要使用代码块。如果没有识别到专有名词，则输出 {{}}。'
    ),
    ResponseDialect.TEXT: (
        "翻译完成后，请另起一行，使用'### Proper Nouns:'作为标记，然后列出你在原文中识别出的专有名词"
        "（人名、地名、书名、组织名、特定术语等）及其对应的中文翻译，每行一个，格式为 '原文术语: 中文翻译'。"
        "书名请使用《》。如果没有识别到专有名词，则省略此部分。"
    ),
    ResponseDialect.PLAIN: (
        "翻译完成后，请另起一行，使用'### Proper Nouns:'作为标记，然后列出你在原文中识别出的专有名词"
        "（人名、地名、书名、组织名、特定术语等）及其对应的中文翻译，每行一个，格式为 '原文术语: 中文翻译'。"
        "如果没有识别到专有名词，则省略此部分。"
    ),
}


def build_batch_prompt(dialect: ResponseDialect) -> ChatPromptTemplate:
    """Batch prompt: numbered sentences in, numbered translations plus a terms section out."""
    dialect = ResponseDialect(dialect)
    system = "{style}\n" + _ORDER_DIRECTIVE + "\n" + _TERMS_DIRECTIVES[dialect] + "\n" + _COUNT_DIRECTIVE
    return ChatPromptTemplate.from_messages(
        [
            ("system", system),
            ("user", "请将以下 {count} 个句子翻译成中文，保留索引标记：\n\n{numbered_sentences}{glossary}"),
        ]
    )


SINGLE_SENTENCE_PROMPT = ChatPromptTemplate.from_messages(
    [
        (
            "system",
            "{style}\n只返回翻译结果，不要包含任何解释、标记或句子索引。",
        ),
        ("user", "请将以下句子翻译成中文，只返回翻译结果：\n\n{sentence}"),
    ]
)


def number_sentences(texts: list[str]) -> str:
    """Prefix each text with its 1-based position: "[1] ...", separated by blank lines."""
    return "\n\n".join(f"[{position}] {text}" for position, text in enumerate(texts, start=1))
