"""sourceguard — static source audits for Next.js and Supabase projects."""

__version__ = "0.1.0"
