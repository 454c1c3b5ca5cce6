from aiohttp import web

ui_routes = web.RouteTableDef()

INDEX_HTML = """<html>
<head><title>My TikTok Downloader</title></head>
<body style="font-family:sans-serif;text-align:center;margin-top:50px;">
<h1>My TikTok Downloader</h1>
<input id="url" style="width:300px;padding:10px" placeholder="TikTok URL here..." />
<button onclick="go()">Get HD</button>
<button onclick="download()">Download</button>
<div id="result" style="margin-top:20px;"></div>
<script>
async function go(){
  const url = document.getElementById("url").value;
  const result = document.getElementById("result");
  result.textContent = "Loading...";
  const res = await fetch("/api/tiktok?url=" + encodeURIComponent(url));
  const data = await res.json();
  if(!data.ok){ result.textContent = "Error: " + data.error; return; }
  result.textContent = "";
  const link = document.createElement("a");
  link.href = data.url;
  link.target = "_blank";
  link.textContent = data.url;
  result.appendChild(link);
  result.appendChild(document.createElement("br"));
  result.appendChild(document.createTextNode(data.quality));
}

function download(){
  const url = document.getElementById("url").value;
  if(!url) return;
  window.location.href = "/download?url=" + encodeURIComponent(url);
}
</script>
</body></html>
"""


@ui_routes.get("/")
async def index(request: web.Request) -> web.Response:
    return web.Response(text=INDEX_HTML, content_type="text/html")
