"""Canned iShares listing page and holdings CSV used by tests."""

LIST_URL = "https://www.ishares.com/us/products/etf-investments"
ICLN_PATH = "/us/products/239738/ishares-global-clean-energy-etf"
HOLDINGS_URL = (
    f"https://www.ishares.com{ICLN_PATH}/1467271812596.ajax?fileType=csv&dataType=fund"
)

LIST_HTML = f"""
<html><body>
<div id="app"></div>
<noscript>
  <table>
    <thead><tr><th>Ticker</th><th>Name</th></tr></thead>
    <tbody>
      <tr>
        <td class="links"><a href="{ICLN_PATH}">ICLN</a></td>
        <td class="links"><a href="{ICLN_PATH}">iShares Global Clean Energy ETF</a></td>
        <td>Equity</td>
      </tr>
      <tr>
        <td class="links"><a href="/us/products/239726/ishares-core-sp-500-etf">IVV</a></td>
        <td class="links"><a href="/us/products/239726/ishares-core-sp-500-etf">iShares Core S&amp;P 500 ETF</a></td>
        <td>Equity</td>
      </tr>
    </tbody>
  </table>
</noscript>
</body></html>
"""

HOLDINGS_CSV = (
    "\ufeffiShares Global Clean Energy ETF\r\n"
    'Fund Holdings as of,"Jan 14, 2022"\r\n'
    'Inception Date,"Jun 24, 2008"\r\n'
    'Shares Outstanding,"110,850,000.00"\r\n'
    'Stock,"-"\r\n'
    "\xa0\r\n"
    "Ticker,Name,Sector,Asset Class,Market Value,Weight (%),Notional Value,Shares,"
    "Price,Location,Exchange,Currency,FX Rate,Market Currency,Accrual Date\r\n"
    '"ENPH","ENPHASE ENERGY INC","Information Technology","Equity","240,338,011.60",'
    '"8.02","240,338,011.60","1,538,216.00","156.25","United States","NASDAQ",'
    '"USD","1.00","USD","-"\r\n'
    '"VWS","VESTAS WIND SYSTEMS","Industrials","Equity","180,000,000.00","6.01",'
    '"180,000,000.00","5,000,000.00","36.00","Denmark",'
    '"Omx Nordic Exchange Copenhagen A/S","DKK","6.52","DKK","-"\r\n'
    '"968","XINYI SOLAR HOLDINGS LTD","Information Technology","Equity","1.00","3.10",'
    '"1.00","1.00","1.00","Hong Kong","Hong Kong Exchanges And Clearing Ltd","HKD",'
    '"7.79","HKD","-"\r\n'
    '"USD","USD CASH","Cash and/or Derivatives","Cash","1,000.00","0.50","1,000.00",'
    '"1,000.00","100.00","United States","-","USD","1.00","USD","-"\r\n'
    '"","","","","","","","","","","","","","",""\r\n'
    "\xa0\r\n"
    '"The content contained herein is owned or licensed by BlackRock."\r\n'
)
