"""
Provider adapters - convert the message model to provider request formats.

Example:
    from transcript_guard import prepare_transcript
    from transcript_guard.adapters.anthropic import to_anthropic_messages

    report = prepare_transcript(messages, "anthropic", "claude-sonnet-4-5")
    params = to_anthropic_messages(report.messages)
"""
