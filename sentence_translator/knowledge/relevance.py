GLOSSARY_HEADER = "### 已知术语表（请在翻译时参考以下术语的翻译）："


def filter_relevant_terms(text: str, all_terms: dict[str, str]) -> dict[str, str]:
    """
    Return only glossary terms whose original occurs verbatim in `text`.
    Keeps the per-batch prompt small as the glossary grows.
    """
    return {original: translation for original, translation in all_terms.items() if original in text}


def format_terms_for_prompt(terms: dict[str, str]) -> str:
    if not terms:
        return ""
    lines = "\n".join(f"{original}: {translation}" for original, translation in terms.items())
    return f"\n\n{GLOSSARY_HEADER}\n{lines}"
