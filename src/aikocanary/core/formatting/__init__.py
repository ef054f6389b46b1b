from .text_formatter import FormattingStyle, format_text, split_into_sentences, wrap_text

__all__ = ["FormattingStyle", "format_text", "split_into_sentences", "wrap_text"]
