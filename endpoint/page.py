"""Host page returned for any request that is not a probe."""

HOST_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>edgespeed probe endpoint</title>
<style>
  body { font-family: -apple-system, sans-serif; max-width: 600px; margin: 0 auto;
         padding: 20px; background: #f0f2f5; color: #333; }
  .container { background: white; padding: 30px; border-radius: 16px;
               box-shadow: 0 4px 12px rgba(0,0,0,0.08); }
  code { background: #f8f9fa; padding: 2px 6px; border-radius: 4px; }
  li { margin-bottom: 8px; }
</style>
</head>
<body>
<div class="container">
  <h1>edgespeed probe endpoint</h1>
  <p>This endpoint answers speed test probes:</p>
  <ul>
    <li><code>GET ?mode=ping</code> &mdash; latency probe</li>
    <li><code>GET ?mode=down</code> &mdash; fixed-size download payload</li>
    <li><code>POST ?mode=up</code> &mdash; upload sink, replies with the byte count</li>
  </ul>
  <p>Run a measurement with <code>python edgespeed.py --url &lt;this page&gt;</code>.</p>
</div>
</body>
</html>
"""
