"""
Academy core library: curriculum catalog, progress engine, tutor streaming.
The HTTP app (api/) and LLM providers (infra/) build on top of this package.
"""
