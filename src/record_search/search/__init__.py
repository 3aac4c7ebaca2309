"""
Search indexing and query engine package.

This package provides the pure-Python search stack behind ``SearchEngine``:
- analyzers: Tokenizer, filters and suffix-stripping stemmers
- inverted_index: Per-index document store, postings and vocabulary
- query_parser: Raw query strings to boolean query trees
- retriever: Candidate sets from query trees, with fuzzy expansion
- scorer: Boosted TF-IDF with phrase and recency bonuses
- filters / ranking / snippet: Filtering, facets, ordering and highlights
- suggestions / metrics: Did-you-mean rewrites and query analytics
"""
