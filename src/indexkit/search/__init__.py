"""
Document building package.

This package turns domain objects into indexable documents:
- stemmers: Language id to stemmer registry (Snowball via Whoosh)
- analyzers: Tokenizer and filters (case folding, stopwords)
- codec: YAML value slot codec
- blueprint: Per-type attribute/index declarations and their registry
- models: ValueSlot and Document
- indexer: Language resolution and document assembly
- storage: Sinks that receive finished documents
"""
