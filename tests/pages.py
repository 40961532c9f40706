"""Trimmed-down NexusPHP pages used across the tests."""

BASE = "https://pt.example.org"

CLAIM_PAGE = """
<html><body>
<table id="claim-table">
  <tr><th>#</th><th>Type</th><th>Title</th></tr>
  <tr><td>1</td><td>Movie</td><td><a href="details.php?id=101&hit=1">Alpha</a></td></tr>
  <tr><td>2</td><td>TV</td><td><a href="details.php?id=102">Beta</a></td></tr>
  <tr><td>3</td><td>Movie</td><td><a href="details.php?id=101">Alpha again</a></td></tr>
</table>
<table id="claim-table">
  <tr><th>#</th><th>Type</th><th>Title</th></tr>
  <tr><td>9</td><td>Music</td><td><a href="details.php?id=999">Second table</a></td></tr>
</table>
</body></html>
"""

HR_PAGE = """
<html><body>
<table id="hr-table">
  <tr><th>#</th><th>Title</th></tr>
  <tr><td>1</td><td><a href="details.php?id=201">Gamma</a></td></tr>
  <tr><td>2</td><td>no link here</td></tr>
  <tr><td>3</td></tr>
  <tr><td>4</td><td><a href="details.php?id=abc">Broken id</a></td></tr>
  <tr><td>5</td><td><a href="details.php?id=202">   </a></td></tr>
  <tr><td>6</td><td><a href="details.php?id=203">Delta</a></td></tr>
</table>
</body></html>
"""

USER_DETAILS_PAGE = """
<html><body>
<table><tr><td>
  <table>
    <tr><th>Type</th><th>Title</th></tr>
    <tr><td>Movie</td><td><a href="details.php?id=301"><b>Epsilon</b> [1080p]</a></td></tr>
    <tr><td>TV</td><td><a href="details.php?id=302">Zeta</a></td></tr>
  </table>
</td></tr>
<tr><td>
  <table>
    <tr><th>Type</th><th>Title</th></tr>
    <tr><td>Movie</td><td><a href="details.php?id=303"><b>Eta</b></a></td></tr>
  </table>
</td></tr></table>
</body></html>
"""

TORRENTS_PAGE = """
<html><body>
<table class="torrents">
  <tr><td>Type</td><td>Name</td></tr>
  <tr><td>Movie</td><td><a href="userdetails.php?id=7">uploader</a>
      <a href="details.php?id=401&hit=1">Theta</a></td></tr>
  <tr><td>TV</td><td><a href="/details.php?id=402#comments">Iota</a></td></tr>
  <tr><td>TV</td><td><a href="mydetails.php?id=403">Not a detail link</a></td></tr>
</table>
</body></html>
"""

DETAIL_PAGE = """
<html><body>
<h1>Kappa</h1>
<a href="download.php?id=501&passkey=abc">Download torrent</a>
</body></html>
"""

DETAIL_PAGE_LOADING = """
<html><body><h1>Kappa</h1><p>Loading...</p></body></html>
"""
