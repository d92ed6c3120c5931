"""Modèles de prompts par type de champ.

Les marqueurs ``{target_language}`` et ``{text}`` sont remplacés littéralement
(pas de ``str.format``) car la description peut contenir des accolades.
"""

DESCRIPTION_PROMPT = """You are a professional localization engine. Translate the human-readable text of the markup below into {target_language}.

Rules:
1. Do not add, remove, reorder or rename any tags or attributes.
2. Preserve whitespace exactly: spaces, newlines, tabs, indentation and blank lines stay unchanged.
3. Preserve all entities and punctuation as written (for example &amp;, &copy;, &nbsp;).
4. Translate only human-visible text nodes, plus these user-facing attribute values: alt, title, placeholder, aria-label.
5. Keep numbers, URLs, placeholders and templating intact: {{...}}, #{...}, <%= %>, %{...}, :em, :en.
6. Do not change code or technical literals inside <code>, <pre>, <kbd>, <samp>, <var> or <tt>.
7. Keep capitalization style where natural in the target language; otherwise follow its conventions.
8. Keep meaning and tone (formal or informal) consistent with the source.
9. If a sentence spans inline tags (<strong>, <em>, <b>, <i>, <u>, <sup>, <sub>), translate the whole sentence and place the tags around the matching translated words.
10. Leave product and brand names untranslated unless they have a common exonym in the target language.
11. The count and order of tags must match the input exactly.

Return only the translated markup with the same indentation and line breaks as the input. No commentary.

Text to translate: {text}"""

SUMMARY_PROMPT = """Translate the following text to {target_language}.

IMPORTANT RULES:
- Return ONLY plain text (no HTML, no special characters, no formatting)
- Maximum {max_chars} characters
- Keep the meaning and tone
- If the text is too long, shorten it while keeping the key message
- Do not add explanations or extra text

Text to translate: {text}"""

KEYWORD_PROMPT = """Translate the following search keyword to {target_language}.

IMPORTANT RULES:
- Return ONLY plain text (no HTML, no special characters, no formatting)
- Maximum {max_chars} characters
- Keep it concise and search-friendly
- Do not add explanations or extra text
- If it is a brand name or proper noun, you may keep it in English

Text to translate: {text}"""

DESCRIPTION_PERSONA = "You are a professional translator specializing in software and technology content."
SUMMARY_PERSONA = "You are a professional translator specializing in concise product summaries and marketing copy."
KEYWORD_PERSONA = "You are a professional translator specializing in search keywords and SEO terms."


def render_prompt(template: str, target_language: str, text: str, max_chars=None) -> str:
    """Substitue la langue cible, la limite et le texte source dans le modèle."""
    prompt = template.replace("{target_language}", target_language)
    if max_chars is not None:
        prompt = prompt.replace("{max_chars}", str(max_chars))
    # Le texte en dernier : son contenu n'est jamais réinterprété
    return prompt.replace("{text}", text)
